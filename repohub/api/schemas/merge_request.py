from datetime import datetime

from pydantic import Field

from repohub.models import MergeRequest

from .base import BaseSchema
from .commit import CommitAuthor


class BranchRef(BaseSchema):
    id: int
    name: str


class MergeRequestResponse(BaseSchema):
    id: int
    title: str
    description: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    creator: CommitAuthor
    source_branch: BranchRef
    target_branch: BranchRef
    review_count: int = 0
    reviewers: list[CommitAuthor] = Field(default_factory=list)

    @classmethod
    def from_model(cls, merge_request: MergeRequest) -> "MergeRequestResponse":
        """Every review counts; a reviewer is listed once, in order of their first review."""
        reviewers = {}
        for review in merge_request.reviews:
            reviewers.setdefault(review.reviewer_id, review.reviewer)

        return cls(
            id=merge_request.id,
            title=merge_request.title,
            description=merge_request.description,
            status=merge_request.status,
            created_at=merge_request.created_at,
            updated_at=merge_request.updated_at,
            creator=CommitAuthor.model_validate(merge_request.creator),
            source_branch=BranchRef.model_validate(merge_request.source_branch),
            target_branch=BranchRef.model_validate(merge_request.target_branch),
            review_count=len(merge_request.reviews),
            reviewers=[CommitAuthor.model_validate(u) for u in reviewers.values()],
        )
