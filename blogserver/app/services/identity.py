"""Bearer-token authentication for the post routes.

Issuing tokens is not this service's job; :func:`register_user` exists so a
local instance (and the tests) can seed users with a known token.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from blogserver.app.core.errors import Unauthenticated
from blogserver.app.core.logging import (
    EVENT_AUTH_REJECTED,
    EVENT_USER_REGISTERED,
    log_event,
)
from blogserver.app.db.session import get_db
from blogserver.app.models.user_record import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making a request."""

    id: int
    username: str


def hash_token(token: str) -> str:
    return hashlib.sha256((token or "").encode("utf-8")).hexdigest()


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def register_user(
    db: Session, username: str, token: str | None = None,
) -> tuple[User, str]:
    """Create a user and return it with its plaintext token.

    The caller owns the transaction; the row is flushed so ``user.id`` is set.
    """
    token = token or generate_token()
    user = User(username=username.strip(), token_hash=hash_token(token))
    db.add(user)
    db.flush()
    log_event(logger, "info", EVENT_USER_REGISTERED, user_id=user.id)
    return user, token


def _reject(reason: str, message: str) -> Unauthenticated:
    log_event(logger, "warning", EVENT_AUTH_REJECTED, reason=reason)
    return Unauthenticated(message)


def extract_bearer_token(authorization: str) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` value.

    Raises:
        Unauthenticated: If the header is missing, uses another scheme,
            or carries an empty token.
    """
    value = (authorization or "").strip()
    if not value:
        raise _reject("missing_header", "Access token required")
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _reject("malformed_header", "Invalid authorization header")
    return token.strip()


def resolve_principal(db: Session, token: str) -> Principal:
    """Look up the user owning *token*.

    Raises:
        Unauthenticated: If no user holds a token with that digest.
    """
    user = db.scalars(
        select(User).where(User.token_hash == hash_token(token))
    ).first()
    if user is None:
        raise _reject("unknown_token", "Invalid or expired token")
    return Principal(id=user.id, username=user.username)


def get_current_principal(
    authorization: str = Header(default=""),
    db: Session = Depends(get_db),
) -> Principal:
    """FastAPI dependency: attach the principal or short-circuit with 401."""
    return resolve_principal(db, extract_bearer_token(authorization))
