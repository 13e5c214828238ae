"""JSON views behind the repository explorer pages.

``/{owner}/{repository}/tree/{branch}/{path...}`` lists a directory and
``/{owner}/{repository}/blob/{branch}/{path...}`` shows a single file. This
router matches almost any three-segment path, so it is included last.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from repohub.api.dependencies.database import get_db_session
from repohub.api.resolver import ExplorerLocation, resolve_location
from repohub.api.routes._utils import (
    get_branch_or_404,
    get_file_content_or_404,
    get_repository_or_404,
    get_snapshot_or_404,
    is_binary,
    is_markdown,
)
from repohub.api.routes.repositories import file_entry
from repohub.api.schemas.explorer import (
    BlobViewResponse,
    Breadcrumb,
    TreeViewResponse,
)
from repohub.config import Settings, get_settings
from repohub.markdown import render_markdown
from repohub.vcs.tree import list_directory

router = APIRouter()


def _resolve_or_400(
    owner: str, repository: str, view: str, ref_path: str, default_branch: str
) -> ExplorerLocation:
    try:
        return resolve_location(owner, repository, view, ref_path, default_branch)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _breadcrumbs(location: ExplorerLocation) -> list[Breadcrumb]:
    return [Breadcrumb(name=name, path=path) for name, path in location.breadcrumbs]


@router.get(
    "/{owner}/{repository}/tree",
    response_model=TreeViewResponse,
    response_model_exclude_none=True,
)
@router.get(
    "/{owner}/{repository}/tree/{ref_path:path}",
    response_model=TreeViewResponse,
    response_model_exclude_none=True,
)
async def tree_view(
    owner: str,
    repository: str,
    ref_path: str = "",
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> TreeViewResponse:
    repo = await get_repository_or_404(db, owner, repository)
    location = _resolve_or_400(
        owner,
        repository,
        "tree",
        ref_path,
        repo.default_branch or settings.DEFAULT_BRANCH,
    )

    entries = await list_directory(db, repo.id, location.path, location.branch)
    return TreeViewResponse(
        owner=owner,
        repository=repository,
        branch=location.branch,
        path=location.path,
        breadcrumbs=_breadcrumbs(location),
        entries=[file_entry(entry) for entry in entries],
    )


@router.get("/{owner}/{repository}/blob/{ref_path:path}", response_model=BlobViewResponse)
async def blob_view(
    owner: str,
    repository: str,
    ref_path: str,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> BlobViewResponse:
    repo = await get_repository_or_404(db, owner, repository)
    location = _resolve_or_400(
        owner,
        repository,
        "blob",
        ref_path,
        repo.default_branch or settings.DEFAULT_BRANCH,
    )

    branch = await get_branch_or_404(db, repo, location.branch)
    snapshot = await get_snapshot_or_404(db, repo, branch, settings)
    file_content = await get_file_content_or_404(db, snapshot, location.path)

    content = file_content.content
    binary = is_binary(content)
    html = None
    if is_markdown(location.path) and not binary:
        html = render_markdown(content, owner, repository, location.branch)

    return BlobViewResponse(
        owner=owner,
        repository=repository,
        branch=location.branch,
        path=location.path,
        name=location.name,
        breadcrumbs=_breadcrumbs(location),
        content=content,
        is_binary=binary,
        html=html,
    )
