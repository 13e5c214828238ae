from sqlalchemy import Column, ForeignKey, Integer, Table

from repohub.models.base import Base

repositories_topics = Table(
    "repositories_topics",
    Base.metadata,
    Column(
        "repository_id", Integer, ForeignKey("repositories.id"), primary_key=True
    ),
    Column("topic_id", Integer, ForeignKey("topics.id"), primary_key=True),
)

repositories_contributors = Table(
    "repositories_contributors",
    Base.metadata,
    Column(
        "repository_id", Integer, ForeignKey("repositories.id"), primary_key=True
    ),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)
