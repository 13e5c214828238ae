"""Map explorer URLs onto repository lookup keys.

Explorer pages live at ``/{owner}/{repository}/{view}/{branch}/{path...}``.
The branch is always the first segment after the view; everything after it is
the path inside the repository.
"""

from dataclasses import dataclass

VIEWS = ("tree", "blob")


@dataclass(frozen=True)
class RepositoryKey:
    owner: str
    name: str


@dataclass(frozen=True)
class ExplorerLocation:
    key: RepositoryKey
    view: str
    branch: str
    path: str = ""

    @property
    def name(self) -> str:
        segments = split_path(self.path)
        return segments[-1] if segments else ""

    @property
    def breadcrumbs(self) -> list[tuple[str, str]]:
        """(name, path) for every segment of the path, outermost first."""
        segments = split_path(self.path)
        return [
            (segment, "/".join(segments[: i + 1]))
            for i, segment in enumerate(segments)
        ]


def split_path(path: str) -> list[str]:
    """Split a repository path into its segments.

    Empty and ``.`` segments are dropped.

    Raises:
        ValueError: if the path tries to climb out with ``..``
    """
    segments = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise ValueError("Path may not contain '..' segments")
        segments.append(segment)
    return segments


def normalize_path(path: str) -> str:
    return "/".join(split_path(path))


def resolve_location(
    owner: str,
    repository: str,
    view: str,
    ref_path: str = "",
    default_branch: str = "main",
) -> ExplorerLocation:
    """Resolve the ``{branch}/{path...}`` tail of an explorer URL.

    An empty tail points at the root of the default branch.

    Raises:
        ValueError: for an unknown view, a ``..`` segment, or a blob view
            without a file path
    """
    if view not in VIEWS:
        raise ValueError(f"Unknown explorer view '{view}'")

    key = RepositoryKey(owner=owner, name=repository)
    segments = split_path(ref_path)
    if not segments:
        branch, path = default_branch, ""
    else:
        branch, path = segments[0], "/".join(segments[1:])

    if view == "blob" and not path:
        raise ValueError("Blob view requires a file path")

    return ExplorerLocation(key=key, view=view, branch=branch, path=path)
