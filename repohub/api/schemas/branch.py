from datetime import datetime

from pydantic import Field

from .base import BaseSchema


class BranchResponse(BaseSchema):
    id: int
    name: str
    head_commit_id: str
    created_at: datetime
    updated_at: datetime


class BranchCreateRequest(BaseSchema):
    name: str = Field(min_length=1)
    source_branch: str | None = None
    source_commit_id: str | None = None
