"""Alembic migration runner for programmatic startup use."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from blogserver.app.core.logging import (
    EVENT_DB_MIGRATION_FAILED,
    EVENT_DB_MIGRATION_STARTED,
    EVENT_DB_MIGRATION_SUCCEEDED,
    log_event,
    setup_logging,
)
from blogserver.app.db.engine import engine

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ALEMBIC_INI = _PROJECT_ROOT / "alembic.ini"


class MigrationError(Exception):
    """Raised when the blog schema cannot be brought up to head."""


def _alembic_config() -> Config:
    cfg = Config(str(_ALEMBIC_INI))
    cfg.set_main_option("script_location", str(_PROJECT_ROOT / "alembic"))
    return cfg


def get_current_revision() -> str | None:
    """Return the revision stamped in the database, or None for a fresh file."""
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def get_head_revision() -> str | None:
    """Return the newest revision under ``alembic/versions``."""
    return ScriptDirectory.from_config(_alembic_config()).get_current_head()


def check_schema_current() -> bool:
    """Return True if the users/posts schema is at head; warn on drift."""
    current = get_current_revision()
    head = get_head_revision()
    if current == head:
        return True
    logger.warning(
        "db_schema_drift: current=%s head=%s (run 'alembic upgrade head')",
        current,
        head,
    )
    return False


def run_migrations() -> None:
    """Upgrade the database to head; no-op when already current.

    Alembic's env.py calls ``fileConfig()`` which replaces root handlers,
    so logging is re-applied once the upgrade finishes.
    """
    current = get_current_revision()
    head = get_head_revision()
    log_event(logger, "info", EVENT_DB_MIGRATION_STARTED, current=current, head=head)
    if current == head:
        log_event(logger, "info", EVENT_DB_MIGRATION_SUCCEEDED, head=head, changed=False)
        return
    try:
        command.upgrade(_alembic_config(), "head")
    except Exception as exc:
        log_event(
            logger, "exception", EVENT_DB_MIGRATION_FAILED,
            current=current, target=head, error=exc,
        )
        raise MigrationError(
            f"Upgrading the blog schema from {current} to {head} failed: {exc}. "
            f"Inspect the matching script in alembic/versions/."
        ) from exc
    finally:
        setup_logging()
    log_event(logger, "info", EVENT_DB_MIGRATION_SUCCEEDED, head=head, changed=True)
