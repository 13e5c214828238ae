"""Resolve a branch head to the files it contains.

Commits are stored as rows with a list of parent ids and the file changes they
introduce. A branch snapshot is built by walking the commits reachable from
the head, newest first, and keeping the newest change seen for each path.
Commits are fetched as the walk reaches them, so a capped walk only reads the
part of the history it visits.
"""

import heapq
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from repohub.models import Branch, Commit, FileChange, FileContent, Repository
from repohub.models.commit import DELETED

logger = get_logger(__name__)


@dataclass
class Snapshot:
    head: str
    # path -> newest change touching it; deleted paths are absent
    files: dict[str, FileChange] = field(default_factory=dict)
    commits: list[Commit] = field(default_factory=list)
    truncated: bool = False


class HistoryWalk:
    """Newest-first walk over a commit graph that is loaded while walking.

    Commits come out newest timestamp first (ties by id) and each one only
    once, so merge histories and cycles in bad data are both safe. The walk
    never pops a commit while a parent it has reached is still unloaded,
    since that parent could be the newer one. Callers feed it with `load`
    until `wanted` is empty.
    """

    def __init__(self, head_id: str, max_commits: int | None = None):
        self.head_id = head_id
        self.max_commits = max_commits
        self.ordered: list[Commit] = []
        self.truncated = False

        self._loaded: dict[str, Commit] = {}
        self._absent: set[str] = set()
        self._seen: set[str] = {head_id}
        self._waiting: list[str] = [head_id]
        self._heap: list[tuple[float, str]] = []

    @property
    def wanted(self) -> list[str]:
        """Ids the walk has reached but not loaded yet."""
        return [
            commit_id
            for commit_id in self._waiting
            if commit_id not in self._loaded and commit_id not in self._absent
        ]

    def load(self, requested: Iterable[str], commits: Iterable[Commit]) -> None:
        """Record the commits fetched for `requested`; ids not among them do not exist."""
        for commit in commits:
            self._loaded.setdefault(commit.id, commit)
        self._absent.update(
            commit_id for commit_id in requested if commit_id not in self._loaded
        )
        self._advance()

    def _advance(self) -> None:
        while True:
            if self.max_commits is not None and len(self.ordered) >= self.max_commits:
                self.truncated = bool(self._heap or self._waiting)
                self._waiting = []
                return
            if self.wanted:
                return

            for commit_id in self._waiting:
                commit = self._loaded.get(commit_id)
                if commit is not None:
                    heapq.heappush(
                        self._heap, (-commit.timestamp.timestamp(), commit_id)
                    )
            self._waiting = []

            if not self._heap:
                return
            _, commit_id = heapq.heappop(self._heap)
            commit = self._loaded[commit_id]
            self.ordered.append(commit)
            for parent_id in commit.parent_ids or []:
                if parent_id not in self._seen:
                    self._seen.add(parent_id)
                    self._waiting.append(parent_id)


def walk_commits(
    commits_by_id: dict[str, Commit],
    head_id: str,
    max_commits: int | None = None,
) -> tuple[list[Commit], bool]:
    """Walk an in-memory history. Returns the visited commits and whether the walk was cut short."""
    walk = HistoryWalk(head_id, max_commits)
    while walk.wanted:
        requested = walk.wanted
        walk.load(
            requested,
            [commits_by_id[i] for i in requested if i in commits_by_id],
        )
    return walk.ordered, walk.truncated


def _snapshot(head_id: str, commits: list[Commit], truncated: bool) -> Snapshot:
    newest: dict[str, FileChange] = {}
    for commit in commits:
        for change in commit.changes:
            newest.setdefault(change.file_path, change)

    files = {
        path: change
        for path, change in newest.items()
        if change.change_type != DELETED
    }
    return Snapshot(head=head_id, files=files, commits=commits, truncated=truncated)


def build_snapshot(
    commits_by_id: dict[str, Commit],
    head_id: str,
    max_commits: int | None = None,
) -> Snapshot:
    commits, truncated = walk_commits(commits_by_id, head_id, max_commits)
    return _snapshot(head_id, commits, truncated)


async def fetch_commits(
    db: AsyncSession, repository_id: int, commit_ids: list[str]
) -> list[Commit]:
    result = await db.scalars(
        select(Commit).where(
            Commit.repository_id == repository_id, Commit.id.in_(commit_ids)
        )
    )
    return result.all()


async def load_snapshot(
    db: AsyncSession,
    repository: Repository,
    branch: Branch,
    max_commits: int | None = None,
) -> Snapshot | None:
    """Build the snapshot for a branch, or None if its head commit is not stored."""
    walk = HistoryWalk(branch.head_commit_id, max_commits)
    while walk.wanted:
        requested = walk.wanted
        walk.load(requested, await fetch_commits(db, repository.id, requested))

    if not walk.ordered:
        logger.warning(
            "Branch head commit not found",
            repository_id=repository.id,
            branch=branch.name,
            head_commit_id=branch.head_commit_id,
        )
        return None

    if walk.truncated:
        logger.info(
            "Commit walk hit the history limit",
            repository_id=repository.id,
            branch=branch.name,
            max_commits=max_commits,
        )
    return _snapshot(branch.head_commit_id, walk.ordered, walk.truncated)


async def read_file(
    db: AsyncSession, snapshot: Snapshot, path: str
) -> FileContent | None:
    change = snapshot.files.get(path)
    if change is None or change.content_hash is None:
        return None
    return await FileContent.get(db, hash=change.content_hash)
