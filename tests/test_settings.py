"""Tests for settings precedence, defaults and DB path validation."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from blogserver.app.core.settings import _DEFAULT_DB_PATH, Settings

# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


class TestOverrides:
    def test_db_path_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            custom = os.path.join(tmpdir, "override.db")
            s = Settings(app_db_path=custom, _env_file=None)  # type: ignore[call-arg]
            assert s.app_db_path == custom

    def test_log_level_override(self) -> None:
        s = Settings(log_level="DEBUG", _env_file=None)  # type: ignore[call-arg]
        assert s.log_level == "DEBUG"

    def test_env_var_wins(self) -> None:
        with patch.dict(os.environ, {"API_PORT": "9100", "DEBUG": "true"}):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.api_port == 9100
        assert s.debug is True

    def test_cors_origins_from_env_json(self) -> None:
        with patch.dict(
            os.environ,
            {"CORS_ALLOW_ORIGINS": '["https://blog.example", "http://localhost:5173"]'},
        ):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.cors_allow_origins == ["https://blog.example", "http://localhost:5173"]

    def test_env_file_used_when_env_absent(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text("LOG_LEVEL=WARNING\nAPI_PORT=8123\n")
            s = Settings(_env_file=str(env_file))  # type: ignore[call-arg]
        assert s.log_level == "WARNING"
        assert s.api_port == 8123


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_default_db_path(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app_db_path == _DEFAULT_DB_PATH
        assert s.app_db_path.endswith("blog.db")

    def test_default_server(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert (s.api_host, s.api_port) == ("127.0.0.1", 8000)

    def test_default_debug_and_level(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.debug is False
        assert s.log_level == "INFO"

    def test_default_cors_origin_is_frontend_dev_server(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.cors_allow_origins == ["http://localhost:3000"]

    def test_database_url_derived_from_path(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.database_url == f"sqlite:///{s.app_db_path}"


# ---------------------------------------------------------------------------
# DB path validation
# ---------------------------------------------------------------------------


class TestDbPathValidation:
    def test_valid_path_creates_parent_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "new", "nested", "blog.db")
            Settings(app_db_path=path, _env_file=None)  # type: ignore[call-arg]
            assert Path(path).parent.exists()

    def test_unwritable_path_raises_with_guidance(self) -> None:
        with pytest.raises(Exception, match="APP_DB_PATH"):
            with patch("pathlib.Path.mkdir", side_effect=OSError("Permission denied")):
                Settings(
                    app_db_path="/nonexistent/readonly/path/blog.db",
                    _env_file=None,  # type: ignore[call-arg]
                )


# ---------------------------------------------------------------------------
# safe_dump
# ---------------------------------------------------------------------------


class TestSafeDump:
    def test_includes_operational_fields(self) -> None:
        dump = Settings(_env_file=None).safe_dump()  # type: ignore[call-arg]
        for key in ("api_host", "api_port", "app_db_path", "log_level", "cors_allow_origins"):
            assert key in dump

    def test_dump_is_loggable(self, caplog: pytest.LogCaptureFixture) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        with caplog.at_level(logging.INFO):
            logging.getLogger("test.safe_dump").info("config_loaded: %s", s.safe_dump())
        assert "config_loaded" in caplog.text
        assert s.app_db_path in caplog.text


class TestSharedSettings:
    def test_singleton_settings_importable(self) -> None:
        from blogserver.app.core.settings import settings

        assert isinstance(settings, Settings)

    def test_engine_uses_singleton_url(self) -> None:
        from blogserver.app.core.settings import settings
        from blogserver.app.db.engine import engine

        assert str(engine.url) == settings.database_url
