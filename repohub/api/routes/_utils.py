from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from repohub.api.resolver import RepositoryKey
from repohub.config import Settings
from repohub.models import Branch, FileContent, Repository, Star, User
from repohub.vcs.history import Snapshot, load_snapshot, read_file

logger = get_logger(__name__)

CONTENT_TYPES = {
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "md": "text/markdown",
}


def content_type_for(path: str) -> str:
    _, dot, extension = path.rpartition(".")
    if not dot:
        return "text/plain"
    return CONTENT_TYPES.get(extension.lower(), "text/plain")


def is_binary(content: str) -> bool:
    return "\x00" in content


def is_markdown(path: str) -> bool:
    return content_type_for(path) == "text/markdown"


def status_filter_or_400(value: str, allowed: tuple[str, ...]) -> str | None:
    """The upper-cased status to filter on, or None for `ALL`."""
    value = value.upper()
    if value == "ALL":
        return None
    if value not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown status '{value}'",
        )
    return value


async def get_repository_or_404(
    db: AsyncSession, owner: str, name: str
) -> Repository:
    key = RepositoryKey(owner=owner, name=name)
    repository: Repository | None = await Repository.get(
        db, owner_name=key.owner, name=key.name
    )
    if repository is None:
        logger.info("Repository not found", owner=key.owner, repository=key.name)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Repository not found"
        )
    return repository


async def find_branch(
    db: AsyncSession, repository: Repository, name: str
) -> Branch | None:
    return await Branch.get(db, repository_id=repository.id, name=name)


async def get_branch_or_404(
    db: AsyncSession, repository: Repository, name: str
) -> Branch:
    branch = await find_branch(db, repository, name)
    if branch is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found"
        )
    return branch


async def get_snapshot_or_404(
    db: AsyncSession, repository: Repository, branch: Branch, settings: Settings
) -> Snapshot:
    snapshot = await load_snapshot(
        db, repository, branch, max_commits=settings.HISTORY_MAX_COMMITS
    )
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Commit not found"
        )
    return snapshot


async def get_file_content_or_404(
    db: AsyncSession, snapshot: Snapshot, path: str
) -> FileContent:
    file_content = await read_file(db, snapshot, path)
    if file_content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="File not found"
        )
    return file_content


async def is_contributor(
    db: AsyncSession, repository: Repository, user: User
) -> bool:
    if user.username is not None and user.username == repository.owner_name:
        return True
    contributors = await repository.awaitable_attrs.contributors
    return any(contributor.id == user.id for contributor in contributors)


async def count_stars(db: AsyncSession, repository: Repository) -> int:
    star_count = await db.scalar(
        select(func.count(Star.id)).where(Star.repository_id == repository.id)
    )
    return star_count or 0
