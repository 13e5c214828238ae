from datetime import datetime
from unittest.mock import MagicMock
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from repohub.models import (
    Branch,
    Commit,
    Feedback,
    File,
    FileChange,
    FileContent,
    Group,
    MergeRequest,
    MergeRequestReview,
    Project,
    Repository,
    Star,
    Topic,
    User,
)
from repohub.models.commit import ADDED, DELETED, MODIFIED
from repohub.models.feedback import ADDRESSED
from repohub.models.feedback import OPEN as FEEDBACK_OPEN
from repohub.models.file import DIRECTORY, FILE
from repohub.models.merge_request import APPROVED, COMMENTED, MERGED, OPEN

IDENTITY_ID = UUID("00000000-0000-0000-0000-000000000000")

README = "# Engine\n\n![logo](img/logo.png)\n"


def scalars_result(items):
    """What `await db.scalars(...)` returns, holding `items`.

    NB: this is not a fixture!
    """
    return MagicMock(all=MagicMock(return_value=list(items)))


def make_commit(commit_id, timestamp, *changes, parents=()):
    """An unsaved Commit with (path, change_type, content_hash) changes.

    NB: this is not a fixture!
    """
    return Commit(
        id=commit_id,
        message=f"commit {commit_id}",
        timestamp=timestamp,
        parent_ids=list(parents),
        changes=[
            FileChange(file_path=path, change_type=change_type, content_hash=hash)
            for path, change_type, hash in changes
        ],
    )


def seed_repositories(db: Session, identity_id: UUID = IDENTITY_ID) -> dict:
    """Populate the test database with users, repositories, history and projects.

    The ``ada/engine`` repository has two topics, two contributors and two
    stars. Its ``main`` branch points at c2, which modifies a.txt and deletes
    docs/guide.md from c1; ``old`` still points at c1 and ``dangling`` points
    at a commit that was never stored. It also has three merge requests and
    three pieces of feedback; loom has one more.

    NB: this is not a fixture!
    """
    ada = User(
        identity_id=identity_id, username="ada", name="Ada Lovelace", avatar_url=None
    )
    charles = User(identity_id=uuid4(), username="charles", name=None, avatar_url=None)
    db.add_all([ada, charles])
    db.flush()

    engine = Repository(
        owner_name="ada",
        name="engine",
        description="Difference engine",
        default_branch="main",
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 2),
        topics=[Topic(name="math"), Topic(name="history")],
        contributors=[ada, charles],
    )
    loom = Repository(
        owner_name="charles",
        name="loom",
        description=None,
        default_branch="trunk",
        created_at=datetime(2024, 3, 1),
        updated_at=datetime(2024, 3, 1),
    )
    secret = Repository(
        owner_name="ada",
        name="notes",
        is_private=True,
        created_at=datetime(2024, 4, 1),
        updated_at=datetime(2024, 4, 1),
    )
    db.add_all([engine, loom, secret])
    db.flush()

    db.add_all(
        [
            FileContent(hash="h-readme", content=README, size=len(README)),
            FileContent(hash="h-a1", content="one", size=3),
            FileContent(hash="h-a2", content="two", size=3),
            FileContent(hash="h-main", content="print('hi')\n", size=12),
            FileContent(hash="h-guide", content="guide", size=5),
        ]
    )
    db.flush()

    c1 = make_commit(
        "c1",
        datetime(2024, 1, 1, 12),
        ("README.md", ADDED, "h-readme"),
        ("a.txt", ADDED, "h-a1"),
        ("src/main.py", ADDED, "h-main"),
        ("docs/guide.md", ADDED, "h-guide"),
    )
    c2 = make_commit(
        "c2",
        datetime(2024, 1, 2, 12),
        ("a.txt", MODIFIED, "h-a2"),
        ("docs/guide.md", DELETED, None),
        parents=["c1"],
    )
    for commit in (c1, c2):
        commit.repository_id = engine.id
        commit.author_id = ada.id
    db.add_all([c1, c2])
    db.flush()

    main = Branch(repository_id=engine.id, name="main", head_commit_id="c2")
    old = Branch(repository_id=engine.id, name="old", head_commit_id="c1")
    db.add_all(
        [
            main,
            old,
            Branch(repository_id=engine.id, name="dangling", head_commit_id="gone"),
            Star(repository_id=engine.id, user_id=ada.id),
            Star(repository_id=engine.id, user_id=charles.id),
        ]
    )

    listing = [
        ("", "src", DIRECTORY, None),
        ("", "Docs", DIRECTORY, None),
        ("", "README.md", FILE, len(README)),
        ("", "a.txt", FILE, 3),
        ("src", "main.py", FILE, 12),
    ]
    db.add_all(
        [
            File(
                repository_id=engine.id,
                branch="main",
                parent_path=parent,
                name=name,
                path=f"{parent}/{name}" if parent else name,
                type=type,
                size=size,
            )
            for parent, name, type, size in listing
        ]
    )

    add_guide = MergeRequest(
        repository_id=engine.id,
        title="Add guide",
        description=None,
        status=OPEN,
        creator=charles,
        source_branch=old,
        target_branch=main,
        created_at=datetime(2024, 2, 1),
        updated_at=datetime(2024, 2, 2),
        reviews=[
            MergeRequestReview(
                reviewer=ada, decision=COMMENTED, created_at=datetime(2024, 2, 1, 1)
            ),
            MergeRequestReview(
                reviewer=charles, decision=COMMENTED, created_at=datetime(2024, 2, 1, 2)
            ),
            MergeRequestReview(
                reviewer=ada, decision=APPROVED, created_at=datetime(2024, 2, 1, 3)
            ),
        ],
    )
    db.add_all(
        [
            add_guide,
            MergeRequest(
                repository_id=engine.id,
                title="Fix typo in README",
                description="readme fix",
                status=MERGED,
                creator=ada,
                source_branch=main,
                target_branch=old,
                created_at=datetime(2024, 2, 3),
                updated_at=datetime(2024, 2, 3),
            ),
            MergeRequest(
                repository_id=engine.id,
                title="Refactor engine",
                description="Moves the Guide into src",
                status=OPEN,
                creator=ada,
                source_branch=main,
                target_branch=old,
                created_at=datetime(2024, 2, 4),
                updated_at=datetime(2024, 2, 5),
            ),
        ]
    )
    db.flush()

    db.add_all(
        [
            Feedback(
                title="Great start",
                content="The difference engine reads well.",
                status=FEEDBACK_OPEN,
                author_id=ada.id,
                repository_id=engine.id,
                created_at=datetime(2024, 3, 1),
            ),
            Feedback(
                title="Needs tests",
                content="Nothing covers src/main.py yet.",
                status=ADDRESSED,
                author_id=charles.id,
                repository_id=engine.id,
                created_at=datetime(2024, 3, 2),
            ),
            Feedback(
                title="Typo in guide",
                content="Second paragraph.",
                status=FEEDBACK_OPEN,
                author_id=charles.id,
                repository_id=engine.id,
                merge_request_id=add_guide.id,
                created_at=datetime(2024, 3, 3),
            ),
            Feedback(
                title="Loom feedback",
                content="Not about the engine.",
                author_id=ada.id,
                repository_id=loom.id,
                created_at=datetime(2024, 3, 4),
            ),
        ]
    )

    lab = Group(name="Babbage Lab", username="lab")
    db.add(lab)
    db.flush()
    db.add_all(
        [
            Project(title="Old", group_id=lab.id, created_at=datetime(2024, 1, 1)),
            Project(title="New", group_id=lab.id, created_at=datetime(2024, 2, 1)),
            Project(
                title="Shelved",
                group_id=lab.id,
                is_archived=True,
                created_at=datetime(2024, 3, 1),
            ),
            Project(
                title="Hidden",
                group_id=lab.id,
                is_private=True,
                created_at=datetime(2024, 3, 2),
            ),
        ]
    )
    db.commit()

    return {
        "ada": ada.id,
        "charles": charles.id,
        "engine": engine.id,
        "loom": loom.id,
        "notes": secret.id,
        "add_guide": add_guide.id,
    }
