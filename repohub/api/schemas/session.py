from uuid import UUID

from .base import BaseSchema


class SessionUser(BaseSchema):
    identity_id: UUID
    username: str | None = None
    name: str | None = None
    email: str | None = None


class SessionResponse(BaseSchema):
    user: SessionUser
