from datetime import datetime

from pydantic import Field

from .base import BaseSchema
from .commit import CommitAuthor


class FeedbackResponse(BaseSchema):
    id: int
    title: str
    content: str
    status: str
    created_at: datetime
    author: CommitAuthor | None = None
    project_id: int | None = None
    merge_request_id: int | None = None


class FeedbackPage(BaseSchema):
    items: list[FeedbackResponse] = Field(default_factory=list)
    # pass back as `cursor` for the next page; null on the last page
    next_cursor: datetime | None = None
