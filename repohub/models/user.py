from uuid import UUID

from sqlalchemy.orm import Mapped, mapped_column

from repohub.models.base import Base


class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True)
    identity_id: Mapped[UUID] = mapped_column(unique=True)
    username: Mapped[str | None] = mapped_column(unique=True)
    name: Mapped[str | None]
    email: Mapped[str | None]
    avatar_url: Mapped[str | None]
