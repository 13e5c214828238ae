from sqlalchemy.orm import Mapped, mapped_column

from repohub.models.base import Base


class Group(Base):
    """A namespace owning projects (and, by username, repositories)."""

    __tablename__ = "groups"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    username: Mapped[str] = mapped_column(unique=True)
