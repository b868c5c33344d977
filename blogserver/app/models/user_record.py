"""SQLAlchemy ORM model for the users table (identity collaborator)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogserver.app.db.base import Base

if TYPE_CHECKING:
    from blogserver.app.models.post_record import Post


class User(Base):
    """A principal that can authenticate with a bearer token and own posts."""

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # SHA-256 hex digest; the raw token is never stored.
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(UTC),
    )

    posts: Mapped[list[Post]] = relationship(back_populates="author")
