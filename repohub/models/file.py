from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from repohub.models.base import Base

FILE = "file"
DIRECTORY = "directory"


class File(Base):
    """A file or directory entry of a repository, scoped per branch."""

    __tablename__ = "files"
    __table_args__ = (
        UniqueConstraint("repository_id", "branch", "parent_path", "name"),
        Index("ix_files_listing", "repository_id", "branch", "parent_path"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(ForeignKey("repositories.id"))
    branch: Mapped[str]
    name: Mapped[str]
    path: Mapped[str]
    parent_path: Mapped[str] = mapped_column(default="")
    type: Mapped[str]
    size: Mapped[int | None]

    @property
    def is_directory(self) -> bool:
        return self.type == DIRECTORY
