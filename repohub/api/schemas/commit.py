from datetime import datetime

from pydantic import Field

from .base import BaseSchema


class CommitAuthor(BaseSchema):
    id: int
    name: str | None = None
    username: str | None = None


class FileChangeResponse(BaseSchema):
    file_path: str
    change_type: str


class CommitResponse(BaseSchema):
    id: str
    message: str = ""
    timestamp: datetime
    parent_ids: list[str] = Field(default_factory=list)
    author: CommitAuthor | None = None
    changes: list[FileChangeResponse] = Field(default_factory=list)
