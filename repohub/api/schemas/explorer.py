from pydantic import Field

from .base import BaseSchema
from .repository import FileEntryResponse


class Breadcrumb(BaseSchema):
    name: str
    path: str


class ExplorerView(BaseSchema):
    owner: str
    repository: str
    branch: str
    path: str
    breadcrumbs: list[Breadcrumb] = Field(default_factory=list)


class TreeViewResponse(ExplorerView):
    entries: list[FileEntryResponse] = Field(default_factory=list)


class BlobViewResponse(ExplorerView):
    name: str
    content: str
    is_binary: bool = False
    html: str | None = None
