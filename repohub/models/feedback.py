from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repohub.models.base import Base

if TYPE_CHECKING:
    from repohub.models.user import User
else:
    User = "User"

OPEN = "OPEN"
ADDRESSED = "ADDRESSED"
CLOSED = "CLOSED"
STATUSES = (OPEN, ADDRESSED, CLOSED)


class Feedback(Base):
    """Reviewer feedback left on a repository, project or merge request."""

    __tablename__ = "feedbacks"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str]
    content: Mapped[str]
    status: Mapped[str] = mapped_column(default=OPEN)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), index=True)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    author: Mapped[User] = relationship(User, lazy="selectin")

    repository_id: Mapped[int | None] = mapped_column(
        ForeignKey("repositories.id"), index=True
    )
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"))
    merge_request_id: Mapped[int | None] = mapped_column(
        ForeignKey("merge_requests.id")
    )
