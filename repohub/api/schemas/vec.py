from datetime import datetime
from typing import Literal

from pydantic import Field

from .base import BaseSchema


class TreeNode(BaseSchema):
    path: str
    type: Literal["tree", "blob"]


class TreeResponse(BaseSchema):
    tree: list[TreeNode] = Field(default_factory=list)
    truncated: bool = False
    # head commit of the resolved branch
    sha: str | None = None


class BlobResponse(BaseSchema):
    text: str
    is_binary: bool = False


class VecOverviewResponse(BaseSchema):
    name: str
    description: str | None = None
    default_branch: str | None = None
    created_at: datetime
    updated_at: datetime
    tags: list[str] = Field(default_factory=list)
