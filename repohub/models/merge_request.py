from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repohub.models.base import Base

if TYPE_CHECKING:
    from repohub.models.branch import Branch
    from repohub.models.user import User
else:
    Branch = "Branch"
    User = "User"

OPEN = "OPEN"
APPROVED = "APPROVED"
REJECTED = "REJECTED"
MERGED = "MERGED"
CLOSED = "CLOSED"
STATUSES = (OPEN, APPROVED, REJECTED, MERGED, CLOSED)

# review decisions
CHANGES_REQUESTED = "CHANGES_REQUESTED"
COMMENTED = "COMMENTED"
DECISIONS = (APPROVED, REJECTED, CHANGES_REQUESTED, COMMENTED)


class MergeRequest(Base):
    """A request to merge one branch of a repository into another."""

    __tablename__ = "merge_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id"), index=True
    )
    title: Mapped[str]
    description: Mapped[str | None]
    status: Mapped[str] = mapped_column(default=OPEN)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    creator: Mapped[User] = relationship(User, lazy="selectin")

    source_branch_id: Mapped[int] = mapped_column(ForeignKey("branches.id"))
    source_branch: Mapped[Branch] = relationship(
        Branch, lazy="selectin", foreign_keys=[source_branch_id]
    )
    target_branch_id: Mapped[int] = mapped_column(ForeignKey("branches.id"))
    target_branch: Mapped[Branch] = relationship(
        Branch, lazy="selectin", foreign_keys=[target_branch_id]
    )

    reviews: Mapped[list["MergeRequestReview"]] = relationship(
        back_populates="merge_request",
        lazy="selectin",
        order_by="MergeRequestReview.created_at",
        cascade="all, delete-orphan",
    )


class MergeRequestReview(Base):
    __tablename__ = "merge_request_reviews"

    id: Mapped[int] = mapped_column(primary_key=True)
    merge_request_id: Mapped[int] = mapped_column(
        ForeignKey("merge_requests.id"), index=True
    )
    decision: Mapped[str]
    comment: Mapped[str | None]
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    reviewer_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    reviewer: Mapped[User] = relationship(User, lazy="selectin")

    merge_request: Mapped[MergeRequest] = relationship(back_populates="reviews")
