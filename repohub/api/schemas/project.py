from datetime import datetime

from .base import BaseSchema


class GroupSummary(BaseSchema):
    name: str


class ProjectResponse(BaseSchema):
    id: int
    title: str
    description: str | None = None
    is_private: bool
    is_archived: bool
    created_at: datetime
    group: GroupSummary
