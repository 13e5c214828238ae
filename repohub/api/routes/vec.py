from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from repohub.api.dependencies.database import get_db_session
from repohub.api.routes._utils import (
    find_branch,
    get_branch_or_404,
    get_file_content_or_404,
    get_repository_or_404,
    get_snapshot_or_404,
    is_binary,
    status_filter_or_400,
)
from repohub.api.schemas.feedback import FeedbackPage, FeedbackResponse
from repohub.api.schemas.vec import (
    BlobResponse,
    TreeNode,
    TreeResponse,
    VecOverviewResponse,
)
from repohub.config import Settings, get_settings
from repohub.models import Feedback
from repohub.models.feedback import STATUSES
from repohub.vcs.history import load_snapshot
from repohub.vcs.tree import build_tree

logger = get_logger(__name__)
router = APIRouter(prefix="/api/vec/repos")


@router.get(
    "/{owner}/{repo}/tree",
    response_model=TreeResponse,
    response_model_exclude_none=True,
)
async def get_commit_tree(
    owner: str,
    repo: str,
    branch: str | None = None,
    recursive: str | None = None,
    path: str = "",
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> TreeResponse:
    """List the tree at the head of `branch`.

    A branch that does not exist (or whose head commit is not stored) has an
    empty tree rather than being an error. Only `recursive=true` lists the
    whole subtree.
    """
    if not branch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing branch parameter"
        )

    repository = await get_repository_or_404(db, owner, repo)
    branch_record = await find_branch(db, repository, branch)
    if branch_record is None:
        return TreeResponse(tree=[], truncated=False)

    snapshot = await load_snapshot(
        db, repository, branch_record, max_commits=settings.HISTORY_MAX_COMMITS
    )
    if snapshot is None:
        return TreeResponse(tree=[], truncated=False)

    try:
        entries, truncated = build_tree(
            snapshot.files.keys(),
            base_path=path,
            recursive=recursive == "true",
            max_entries=settings.TREE_MAX_ENTRIES,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if truncated:
        logger.info(
            "Truncated tree listing",
            repository_id=repository.id,
            branch=branch,
            max_entries=settings.TREE_MAX_ENTRIES,
        )
    return TreeResponse(
        tree=[TreeNode(path=entry.path, type=entry.type) for entry in entries],
        truncated=truncated or snapshot.truncated,
        sha=snapshot.head,
    )


@router.get("/{owner}/{repo}/blob", response_model=BlobResponse)
async def get_blob(
    owner: str,
    repo: str,
    branch: str | None = None,
    path: str | None = None,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> BlobResponse:
    if not branch or not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing branch or path parameter",
        )

    repository = await get_repository_or_404(db, owner, repo)
    branch_record = await get_branch_or_404(db, repository, branch)
    snapshot = await get_snapshot_or_404(db, repository, branch_record, settings)
    file_content = await get_file_content_or_404(db, snapshot, path.strip("/"))

    return BlobResponse(
        text=file_content.content, is_binary=is_binary(file_content.content)
    )


@router.get("/{owner}/{repo}/overview", response_model=VecOverviewResponse)
async def get_overview(
    owner: str,
    repo: str,
    db: AsyncSession = Depends(get_db_session),
) -> VecOverviewResponse:
    repository = await get_repository_or_404(db, owner, repo)
    branch_names = [branch.name for branch in await repository.awaitable_attrs.branches]

    if repository.default_branch in branch_names:
        default_branch = repository.default_branch
    else:
        default_branch = branch_names[0] if branch_names else None

    return VecOverviewResponse(
        name=repository.name,
        description=repository.description,
        default_branch=default_branch,
        created_at=repository.created_at,
        updated_at=repository.updated_at,
        tags=[topic.name for topic in repository.topics],
    )


@router.get("/{owner}/{repo}/feedbacks", response_model=FeedbackPage)
async def list_feedbacks(
    owner: str,
    repo: str,
    state: str = "ALL",
    search: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    cursor: datetime | None = None,
    db: AsyncSession = Depends(get_db_session),
) -> FeedbackPage:
    """Feedback left on a repository, newest first.

    Pages are keyed on creation time: pass the `nextCursor` of one page as
    `cursor` to get the next. A short page has no `nextCursor`.
    """
    repository = await get_repository_or_404(db, owner, repo)

    stmt = select(Feedback).where(Feedback.repository_id == repository.id)
    state_value = status_filter_or_400(state, STATUSES)
    if state_value is not None:
        stmt = stmt.where(Feedback.status == state_value)
    if search:
        stmt = stmt.where(
            or_(
                Feedback.title.icontains(search, autoescape=True),
                Feedback.content.icontains(search, autoescape=True),
            )
        )
    if cursor is not None:
        stmt = stmt.where(Feedback.created_at < cursor)

    result = await db.scalars(
        stmt.order_by(Feedback.created_at.desc(), Feedback.id.desc()).limit(limit)
    )
    feedbacks = result.all()

    return FeedbackPage(
        items=[FeedbackResponse.model_validate(feedback) for feedback in feedbacks],
        next_cursor=feedbacks[-1].created_at if len(feedbacks) == limit else None,
    )
