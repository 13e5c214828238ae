from datetime import datetime
from typing import Literal

from pydantic import Field

from repohub.models import User

from .base import BaseSchema

AVATAR_FALLBACK_URL = "https://avatar.vercel.sh/{seed}"


class TopicResponse(BaseSchema):
    id: int
    name: str


class ContributorResponse(BaseSchema):
    id: int
    name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "ContributorResponse":
        """Display name falls back to the username, avatar to a generated one."""
        return cls(
            id=user.id,
            name=user.name or user.username,
            avatar_url=user.avatar_url
            or AVATAR_FALLBACK_URL.format(seed=user.username or f"user-{user.id}"),
        )


class RepositoryOverviewResponse(BaseSchema):
    id: int
    name: str
    description: str | None = None
    default_branch: str = "main"
    topics: list[TopicResponse] = Field(default_factory=list)
    contributors: list[ContributorResponse] = Field(default_factory=list)
    star_count: int = 0


class FileEntryResponse(BaseSchema):
    name: str
    path: str
    type: Literal["file", "directory"]
    size: int | None = None


class RepositoryStats(BaseSchema):
    commits: int = 0
    branches: int = 0
    stars: int = 0


class TopRepositoryResponse(BaseSchema):
    id: int
    name: str
    description: str | None = None
    owner_name: str
    created_at: datetime
    updated_at: datetime
    stats: RepositoryStats


class ReadmeResponse(BaseSchema):
    path: str
    content: str
    html: str | None = None


class StarResponse(BaseSchema):
    starred: bool
    star_count: int
