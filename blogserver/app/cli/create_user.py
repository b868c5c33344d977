"""Seed a user and print its bearer token.

Usage::

    python -m blogserver.app.cli.create_user alice
"""

from __future__ import annotations

import argparse

from blogserver.app.db.migrations import run_migrations
from blogserver.app.db.session import SessionLocal
from blogserver.app.services.identity import register_user


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a blog user with an API token.")
    parser.add_argument("username")
    parser.add_argument(
        "--token",
        default="",
        help="Use this token instead of generating one.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    username = args.username.strip()
    if not username:
        raise SystemExit("username must be non-empty")

    run_migrations()
    db = SessionLocal()
    try:
        user, token = register_user(db, username, token=args.token or None)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print(f"user_id={user.id} username={user.username}")
    print(f"token={token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
