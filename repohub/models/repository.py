from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repohub.models._associations import (
    repositories_contributors,
    repositories_topics,
)
from repohub.models.base import Base

if TYPE_CHECKING:
    from repohub.models.branch import Branch
    from repohub.models.star import Star
    from repohub.models.topic import Topic
    from repohub.models.user import User
else:
    Branch = "Branch"
    Star = "Star"
    Topic = "Topic"
    User = "User"


class Repository(Base):
    __tablename__ = "repositories"
    __table_args__ = (UniqueConstraint("owner_name", "name"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    # username of the owning user or group
    owner_name: Mapped[str]
    name: Mapped[str]
    description: Mapped[str | None]
    default_branch: Mapped[str | None] = mapped_column(default="main")
    is_private: Mapped[bool] = mapped_column(default=False)
    is_archived: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    topics: Mapped[list[Topic]] = relationship(
        Topic,
        secondary=repositories_topics,
        lazy="selectin",
        order_by="Topic.name",
    )
    contributors: Mapped[list[User]] = relationship(
        User,
        secondary=repositories_contributors,
        lazy="selectin",
        order_by="User.id",
    )
    # loaded on demand; star counts are always computed with COUNT(*)
    branches: Mapped[list[Branch]] = relationship(
        Branch, lazy="select", order_by="Branch.name", cascade="all, delete-orphan"
    )
    stars: Mapped[list[Star]] = relationship(
        Star, lazy="select", cascade="all, delete-orphan"
    )
