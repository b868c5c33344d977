"""Tests for bearer-token resolution and user seeding."""

import logging
from collections.abc import Iterator

import pytest
from blogserver.app.core.errors import Unauthenticated
from blogserver.app.db.base import Base
from blogserver.app.models.post_record import Post  # noqa: F401
from blogserver.app.models.user_record import User
from blogserver.app.services.identity import (
    Principal,
    extract_bearer_token,
    generate_token,
    hash_token,
    register_user,
    resolve_principal,
)
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker


@pytest.fixture()
def db() -> Iterator[Session]:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


class TestTokens:
    def test_hash_is_sha256_hex(self) -> None:
        digest = hash_token("abc")
        assert len(digest) == 64
        assert digest == hash_token("abc")
        assert digest != hash_token("abd")

    def test_generated_tokens_are_unique(self) -> None:
        assert generate_token() != generate_token()


class TestExtractBearerToken:
    def test_valid_header(self) -> None:
        assert extract_bearer_token("Bearer abc123") == "abc123"

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_bearer_token("bearer abc123") == "abc123"

    def test_surrounding_whitespace_stripped(self) -> None:
        assert extract_bearer_token("  Bearer   abc123  ") == "abc123"

    @pytest.mark.parametrize("header", ["", "   ", "Bearer", "Bearer    ", "Basic abc", "abc"])
    def test_rejected_headers(self, header: str) -> None:
        with pytest.raises(Unauthenticated):
            extract_bearer_token(header)

    def test_rejection_is_logged_without_token(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING), pytest.raises(Unauthenticated):
            extract_bearer_token("Basic s3cr3t")
        assert "auth_rejected" in caplog.text
        assert "reason=malformed_header" in caplog.text
        assert "s3cr3t" not in caplog.text


class TestRegisterAndResolve:
    def test_register_stores_only_digest(self, db: Session) -> None:
        user, token = register_user(db, "alice", token="plain-token")
        db.commit()
        assert token == "plain-token"
        stored = db.scalars(select(User).where(User.id == user.id)).one()
        assert stored.token_hash == hash_token("plain-token")
        assert "plain-token" not in stored.token_hash

    def test_register_generates_token_when_absent(self, db: Session) -> None:
        _, token = register_user(db, "bob")
        assert token

    def test_register_strips_username(self, db: Session) -> None:
        user, _ = register_user(db, "  carol  ")
        assert user.username == "carol"

    def test_resolve_known_token(self, db: Session) -> None:
        user, token = register_user(db, "alice")
        db.commit()
        assert resolve_principal(db, token) == Principal(id=user.id, username="alice")

    def test_resolve_unknown_token(self, db: Session) -> None:
        register_user(db, "alice", token="right")
        db.commit()
        with pytest.raises(Unauthenticated) as exc_info:
            resolve_principal(db, "wrong")
        assert exc_info.value.http_status == 401
