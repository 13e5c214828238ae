from .base import Base  # noqa
from .branch import Branch  # noqa
from .commit import Commit, FileChange, FileContent  # noqa
from .feedback import Feedback  # noqa
from .file import File  # noqa
from .group import Group  # noqa
from .merge_request import MergeRequest, MergeRequestReview  # noqa
from .project import Project  # noqa
from .repository import Repository  # noqa
from .star import Star  # noqa
from .topic import Topic  # noqa
from .user import User  # noqa
