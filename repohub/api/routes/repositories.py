from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from repohub.api.dependencies.auth import authed_user
from repohub.api.dependencies.database import get_db_session
from repohub.api.resolver import normalize_path
from repohub.api.routes._utils import (
    content_type_for,
    count_stars,
    find_branch,
    get_branch_or_404,
    get_file_content_or_404,
    get_repository_or_404,
    get_snapshot_or_404,
    is_contributor,
    is_markdown,
    status_filter_or_400,
)
from repohub.api.schemas.branch import BranchCreateRequest, BranchResponse
from repohub.api.schemas.commit import CommitResponse
from repohub.api.schemas.merge_request import MergeRequestResponse
from repohub.api.schemas.repository import (
    ContributorResponse,
    FileEntryResponse,
    ReadmeResponse,
    RepositoryOverviewResponse,
    RepositoryStats,
    StarResponse,
    TopicResponse,
    TopRepositoryResponse,
)
from repohub.config import Settings, get_settings
from repohub.markdown import render_markdown
from repohub.models import Branch, Commit, File, MergeRequest, Repository, Star, User
from repohub.models.merge_request import OPEN, STATUSES
from repohub.vcs.history import read_file
from repohub.vcs.tree import list_directory

logger = get_logger(__name__)
router = APIRouter(prefix="/api/repositories")

README_NAMES = ("README.md", "Readme.md", "readme.md", "README.txt", "readme.txt")


def _normalized_or_400(path: str) -> str:
    try:
        return normalize_path(path)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def file_entry(entry: File) -> FileEntryResponse:
    return FileEntryResponse(
        name=entry.name,
        path=entry.path,
        type=entry.type,
        size=None if entry.is_directory else entry.size,
    )


@router.get("/top", response_model=list[TopRepositoryResponse])
async def get_top_repositories(
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
    db: AsyncSession = Depends(get_db_session),
):
    """Newest public repositories with their commit, branch and star counts."""

    def _count(model):
        return (
            select(func.count(model.id))
            .where(model.repository_id == Repository.id)
            .correlate(Repository)
            .scalar_subquery()
        )

    stmt = (
        select(Repository, _count(Commit), _count(Branch), _count(Star))
        .where(Repository.is_private.is_(False))
        .order_by(Repository.created_at.desc())
        .limit(limit)
    )
    rows = (await db.execute(stmt)).all()
    return [
        TopRepositoryResponse(
            id=repository.id,
            name=repository.name,
            description=repository.description,
            owner_name=repository.owner_name,
            created_at=repository.created_at,
            updated_at=repository.updated_at,
            stats=RepositoryStats(commits=commits, branches=branches, stars=stars),
        )
        for repository, commits, branches, stars in rows
    ]


@router.get(
    "/{owner}/{repository}/overview",
    status_code=status.HTTP_200_OK,
    response_model=RepositoryOverviewResponse,
)
async def get_repository_overview(
    owner: str,
    repository: str,
    db: AsyncSession = Depends(get_db_session),
) -> RepositoryOverviewResponse:
    repo = await get_repository_or_404(db, owner, repository)
    star_count = await count_stars(db, repo)

    return RepositoryOverviewResponse(
        id=repo.id,
        name=repo.name,
        description=repo.description,
        default_branch=repo.default_branch,
        topics=[TopicResponse.model_validate(topic) for topic in repo.topics],
        contributors=[ContributorResponse.from_user(user) for user in repo.contributors],
        star_count=star_count,
    )


@router.get(
    "/{owner}/{repository}/tree",
    response_model=list[FileEntryResponse],
    response_model_exclude_none=True,
)
async def get_repository_tree(
    owner: str,
    repository: str,
    path: str | None = None,
    branch: str | None = None,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> list[FileEntryResponse]:
    """List the direct children of `path`, directories first."""
    repo = await get_repository_or_404(db, owner, repository)
    entries = await list_directory(
        db,
        repo.id,
        _normalized_or_400(path or ""),
        branch or settings.DEFAULT_BRANCH,
    )
    return [file_entry(entry) for entry in entries]


@router.get("/{owner}/{repository}/raw")
async def get_raw_content(
    owner: str,
    repository: str,
    path: str | None = None,
    branch: str | None = None,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Serve a file as it is at the head of `branch`."""
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="File path is required"
        )
    file_path = _normalized_or_400(path)

    repo = await get_repository_or_404(db, owner, repository)
    branch_record = await get_branch_or_404(
        db, repo, branch or settings.DEFAULT_BRANCH
    )
    snapshot = await get_snapshot_or_404(db, repo, branch_record, settings)
    file_content = await get_file_content_or_404(db, snapshot, file_path)

    return Response(
        content=file_content.content, media_type=content_type_for(file_path)
    )


@router.get("/{owner}/{repository}/readme", response_model=ReadmeResponse)
async def get_readme(
    owner: str,
    repository: str,
    branch: str | None = None,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> ReadmeResponse:
    branch_name = branch or settings.DEFAULT_BRANCH
    repo = await get_repository_or_404(db, owner, repository)
    branch_record = await get_branch_or_404(db, repo, branch_name)
    snapshot = await get_snapshot_or_404(db, repo, branch_record, settings)

    readme_path = next((name for name in README_NAMES if name in snapshot.files), None)
    if readme_path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="README not found"
        )

    file_content = await read_file(db, snapshot, readme_path)
    if file_content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="README content not found"
        )

    html = None
    if is_markdown(readme_path):
        html = render_markdown(file_content.content, owner, repository, branch_name)
    return ReadmeResponse(path=readme_path, content=file_content.content, html=html)


@router.get("/{owner}/{repository}/branches", response_model=list[BranchResponse])
async def list_branches(
    owner: str,
    repository: str,
    db: AsyncSession = Depends(get_db_session),
):
    repo = await get_repository_or_404(db, owner, repository)
    result = await db.scalars(
        select(Branch).where(Branch.repository_id == repo.id).order_by(Branch.name)
    )
    return result.all()


@router.post(
    "/{owner}/{repository}/branches",
    status_code=status.HTTP_201_CREATED,
    response_model=BranchResponse,
)
async def create_branch(
    owner: str,
    repository: str,
    branch_data: BranchCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(authed_user),
):
    """Create a branch pointing at a source branch's head or at a given commit."""
    log = logger.bind(owner=owner, repository=repository, branch=branch_data.name)
    if not branch_data.source_branch and not branch_data.source_commit_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Source branch or commit ID is required",
        )

    repo = await get_repository_or_404(db, owner, repository)
    if not await is_contributor(db, repo, user):
        log.info("Refused branch creation", username=user.username)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied"
        )

    if await find_branch(db, repo, branch_data.name) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A branch with this name already exists",
        )

    if branch_data.source_commit_id:
        commit: Commit | None = await Commit.get(
            db, id=branch_data.source_commit_id, repository_id=repo.id
        )
        if commit is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Source commit not found",
            )
        head_commit_id = commit.id
    else:
        source = await find_branch(db, repo, branch_data.source_branch)
        if source is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Source branch not found",
            )
        head_commit_id = source.head_commit_id

    new_branch = Branch(
        repository_id=repo.id, name=branch_data.name, head_commit_id=head_commit_id
    )
    db.add(new_branch)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A branch with this name already exists",
        ) from e
    await db.refresh(new_branch)

    log.info("Created branch", head_commit_id=head_commit_id)
    return new_branch


@router.get("/{owner}/{repository}/commits", response_model=list[CommitResponse])
async def list_commits(
    owner: str,
    repository: str,
    branch: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 30,
    page: Annotated[int, Query(ge=1)] = 1,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Commits reachable from the branch head, newest first."""
    repo = await get_repository_or_404(db, owner, repository)
    branch_record = await get_branch_or_404(
        db, repo, branch or settings.DEFAULT_BRANCH
    )
    snapshot = await get_snapshot_or_404(db, repo, branch_record, settings)

    start = (page - 1) * limit
    return snapshot.commits[start : start + limit]


@router.get(
    "/{owner}/{repository}/pull-requests",
    response_model=list[MergeRequestResponse],
)
async def list_pull_requests(
    owner: str,
    repository: str,
    status_filter: Annotated[str, Query(alias="status")] = OPEN,
    search: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 30,
    page: Annotated[int, Query(ge=1)] = 1,
    db: AsyncSession = Depends(get_db_session),
) -> list[MergeRequestResponse]:
    """Merge requests of a repository, most recently updated first.

    Only open ones by default; `status=ALL` lists every status. `search`
    matches the title or description, ignoring case.
    """
    repo = await get_repository_or_404(db, owner, repository)

    stmt = select(MergeRequest).where(MergeRequest.repository_id == repo.id)
    status_value = status_filter_or_400(status_filter, STATUSES)
    if status_value is not None:
        stmt = stmt.where(MergeRequest.status == status_value)
    if search:
        stmt = stmt.where(
            or_(
                MergeRequest.title.icontains(search, autoescape=True),
                MergeRequest.description.icontains(search, autoescape=True),
            )
        )

    result = await db.scalars(
        stmt.order_by(MergeRequest.updated_at.desc(), MergeRequest.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return [MergeRequestResponse.from_model(mr) for mr in result.all()]


@router.put("/{owner}/{repository}/star", response_model=StarResponse)
async def star_repository(
    owner: str,
    repository: str,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(authed_user),
) -> StarResponse:
    repo = await get_repository_or_404(db, owner, repository)

    if await Star.get(db, repository_id=repo.id, user_id=user.id) is None:
        db.add(Star(repository_id=repo.id, user_id=user.id))
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User has already starred this repository.",
            ) from e
        logger.info("Starred repository", repository_id=repo.id)

    return StarResponse(starred=True, star_count=await count_stars(db, repo))


@router.delete("/{owner}/{repository}/star", response_model=StarResponse)
async def unstar_repository(
    owner: str,
    repository: str,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(authed_user),
) -> StarResponse:
    repo = await get_repository_or_404(db, owner, repository)

    star = await Star.get(db, repository_id=repo.id, user_id=user.id)
    if star is not None:
        await db.delete(star)
        await db.commit()
        logger.info("Unstarred repository", repository_id=repo.id)

    return StarResponse(starred=False, star_count=await count_stars(db, repo))
