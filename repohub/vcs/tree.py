from typing import Iterable, NamedTuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repohub.api.resolver import split_path
from repohub.models import File
from repohub.models.file import DIRECTORY

TREE = "tree"
BLOB = "blob"


class TreeEntry(NamedTuple):
    path: str
    type: str


def sort_entries(entries: Iterable[File]) -> list[File]:
    """Directories first, then by name in code-point (case-sensitive) order."""
    return sorted(entries, key=lambda entry: (entry.type != DIRECTORY, entry.name))


async def list_directory(
    db: AsyncSession, repository_id: int, parent_path: str, branch: str
) -> list[File]:
    """Direct children of `parent_path` on `branch`. An empty directory is an empty list."""
    result = await db.scalars(
        select(File).where(
            File.repository_id == repository_id,
            File.parent_path == parent_path,
            File.branch == branch,
        )
    )
    return sort_entries(result.all())


def build_tree(
    paths: Iterable[str],
    base_path: str = "",
    recursive: bool = False,
    max_entries: int | None = None,
) -> tuple[list[TreeEntry], bool]:
    """List the entries below `base_path` given the full paths of all files.

    Directories are implied by the file paths. Without `recursive` only the
    direct children of `base_path` are returned. Entries are ordered by path;
    at most `max_entries` are returned and the flag tells whether any were
    dropped.
    """
    base = split_path(base_path)
    nodes: dict[str, str] = {}

    for path in paths:
        segments = split_path(path)
        if len(segments) <= len(base) or segments[: len(base)] != base:
            continue
        relative = segments[len(base) :]
        depth = len(relative) if recursive else 1
        for i in range(1, depth + 1):
            node_path = "/".join([*base, *relative[:i]])
            if i == len(relative):
                nodes[node_path] = BLOB
            else:
                nodes.setdefault(node_path, TREE)

    entries = [TreeEntry(path, kind) for path, kind in sorted(nodes.items())]
    if max_entries is not None and len(entries) > max_entries:
        return entries[:max_entries], True
    return entries, False
