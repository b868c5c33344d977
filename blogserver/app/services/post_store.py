"""Post persistence behind a store-agnostic interface.

Stores
------
- **SqlAlchemyPostStore**: the production store over a request-scoped
  SQLAlchemy ``Session``.  Each operation is its own unit of work.
- **InMemoryPostStore**: dict-backed store for tests and local fakes.

Routes depend on :func:`get_post_store`, so either implementation can be
swapped in through FastAPI's ``dependency_overrides``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogserver.app.core.errors import StoreError
from blogserver.app.core.logging import (
    EVENT_DB_READ_FAILED,
    EVENT_DB_WRITE_FAILED,
    log_event,
)
from blogserver.app.db.session import get_db
from blogserver.app.models.post_record import Post, utcnow
from blogserver.app.models.user_record import User

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class PostStore(Protocol):
    """Operations the post routes need from persistence."""

    def create(
        self, *, title: str, content: str, published: bool, author_id: int,
    ) -> Post: ...

    def get(self, post_id: int) -> Post | None: ...

    def find(
        self, *, published: bool | None = None, author_id: int | None = None,
    ) -> list[Post]:
        """Return matching posts, newest first."""
        ...

    def save(self, post: Post) -> Post: ...

    def delete(self, post_id: int) -> bool:
        """Remove a post permanently; False if it did not exist."""
        ...


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------


class SqlAlchemyPostStore:
    """Post store over a caller-supplied session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def _guard(self, operation: str, *, write: bool) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            if write:
                self._db.rollback()
            log_event(
                logger, "error",
                EVENT_DB_WRITE_FAILED if write else EVENT_DB_READ_FAILED,
                operation=operation,
                error_category="db",
                detail=type(exc).__name__,
            )
            raise StoreError(f"Store operation '{operation}' failed") from exc

    def create(
        self, *, title: str, content: str, published: bool, author_id: int,
    ) -> Post:
        now = utcnow()
        post = Post(
            title=title,
            content=content,
            published=published,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        with self._guard("create_post", write=True):
            self._db.add(post)
            self._db.commit()
            self._db.refresh(post)
        return post

    def get(self, post_id: int) -> Post | None:
        with self._guard("get_post", write=False):
            return self._db.get(Post, post_id)

    def find(
        self, *, published: bool | None = None, author_id: int | None = None,
    ) -> list[Post]:
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        if published is not None:
            stmt = stmt.where(Post.published == published)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        with self._guard("find_posts", write=False):
            return list(self._db.scalars(stmt).all())

    def save(self, post: Post) -> Post:
        post.updated_at = utcnow()
        with self._guard("save_post", write=True):
            self._db.add(post)
            self._db.commit()
            self._db.refresh(post)
        return post

    def delete(self, post_id: int) -> bool:
        with self._guard("delete_post", write=True):
            post = self._db.get(Post, post_id)
            if post is None:
                return False
            self._db.delete(post)
            self._db.commit()
        return True


# ---------------------------------------------------------------------------
# In-memory store (tests + fakes)
# ---------------------------------------------------------------------------


class InMemoryPostStore:
    """Keeps transient ``Post`` objects in a dict keyed by id.

    Authors must be registered with :meth:`add_author` before they create
    posts, so responses can carry the author's username.
    """

    def __init__(self) -> None:
        self._posts: dict[int, Post] = {}
        self._authors: dict[int, User] = {}
        self._next_id = 1

    def add_author(self, user_id: int, username: str) -> User:
        user = User(id=user_id, username=username, token_hash="")
        self._authors[user_id] = user
        return user

    def create(
        self, *, title: str, content: str, published: bool, author_id: int,
    ) -> Post:
        author = self._authors.get(author_id)
        if author is None:
            raise StoreError(f"Unknown author: id={author_id}")
        now = utcnow()
        post = Post(
            id=self._next_id,
            title=title,
            content=content,
            published=published,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        post.author = author
        self._posts[post.id] = post
        self._next_id += 1
        return post

    def get(self, post_id: int) -> Post | None:
        return self._posts.get(post_id)

    def find(
        self, *, published: bool | None = None, author_id: int | None = None,
    ) -> list[Post]:
        matches = [
            p for p in self._posts.values()
            if (published is None or p.published == published)
            and (author_id is None or p.author_id == author_id)
        ]
        return sorted(matches, key=lambda p: (p.created_at, p.id), reverse=True)

    def save(self, post: Post) -> Post:
        post.updated_at = utcnow()
        self._posts[post.id] = post
        return post

    def delete(self, post_id: int) -> bool:
        return self._posts.pop(post_id, None) is not None


def get_post_store(db: Session = Depends(get_db)) -> PostStore:
    """FastAPI dependency returning the production store for this request."""
    return SqlAlchemyPostStore(db)
