from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repohub.models.base import Base

if TYPE_CHECKING:
    from repohub.models.user import User

ADDED = "ADDED"
MODIFIED = "MODIFIED"
DELETED = "DELETED"


class Commit(Base):
    __tablename__ = "commits"
    id: Mapped[str] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id"), index=True
    )
    message: Mapped[str] = mapped_column(default="")
    parent_ids: Mapped[list[str]] = mapped_column(
        postgresql.ARRAY(String), default=list
    )
    timestamp: Mapped[datetime] = mapped_column(server_default=func.now())

    author_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))
    author: Mapped[Optional["User"]] = relationship(lazy="selectin")

    changes: Mapped[list["FileChange"]] = relationship(
        back_populates="commit",
        lazy="selectin",
        order_by="FileChange.file_path",
        cascade="all, delete-orphan",
    )


class FileChange(Base):
    __tablename__ = "file_changes"
    id: Mapped[int] = mapped_column(primary_key=True)
    commit_id: Mapped[str] = mapped_column(ForeignKey("commits.id"), index=True)
    file_path: Mapped[str]
    change_type: Mapped[str]
    # null for deletions
    content_hash: Mapped[str | None] = mapped_column(
        ForeignKey("file_contents.hash")
    )

    commit: Mapped[Commit] = relationship(back_populates="changes")


class FileContent(Base):
    """Content-addressed file body, shared between commits."""

    __tablename__ = "file_contents"
    hash: Mapped[str] = mapped_column(primary_key=True)
    content: Mapped[str]
    size: Mapped[int] = mapped_column(default=0)
