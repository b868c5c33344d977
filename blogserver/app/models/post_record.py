"""SQLAlchemy ORM model for the posts table."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogserver.app.db.base import Base
from blogserver.app.models.user_record import User

# Fields a post's author may change after creation; author_id is not one of them.
MUTABLE_FIELDS = ("title", "content", "published")


def utcnow() -> datetime:
    return datetime.now(UTC)


class Post(Base):
    """A blog post owned by the user who created it."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_published_created_at", "published", "created_at"),
        Index("ix_posts_author_id_created_at", "author_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False,
    )
    published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow,
    )

    author: Mapped[User] = relationship(back_populates="posts", lazy="joined")
