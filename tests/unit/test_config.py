"""Tests pour Settings et configure_logging."""

import json
from pathlib import Path

import pytest
from loguru import logger
from pydantic import ValidationError

from watchlog.config import Settings
from watchlog.logging_config import configure_logging, console_filter, level_for_verbosity


class TestSettings:
    """Tests pour la configuration pydantic-settings."""

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("WATCHLOG_USER_ID", "alice")
        monkeypatch.setenv("WATCHLOG_UPSERT_BATCH_SIZE", "50")

        settings = Settings()

        assert settings.user_id == "alice"
        assert settings.upsert_batch_size == 50
        assert settings.delete_batch_size == 300

    def test_paths_are_expanded(self) -> None:
        settings = Settings(library_file="~/watchlog/library.json")
        assert settings.library_file == Path.home() / "watchlog" / "library.json"

    def test_tmdb_enabled(self) -> None:
        assert Settings(tmdb_api_key="abc").tmdb_enabled is True
        assert Settings(tmdb_api_key="").tmdb_enabled is False

    def test_invalid_values(self) -> None:
        with pytest.raises(ValidationError):
            Settings(user_id="")
        with pytest.raises(ValidationError):
            Settings(delete_batch_size=0)


class TestConfigureLogging:
    """Tests pour le logging loguru."""

    def test_file_handler_writes_json(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "watchlog.log"
        configure_logging(Settings(log_file=log_file))

        logger.info("message de test")
        logger.complete()

        assert log_file.exists()
        line = log_file.read_text(encoding="utf-8").splitlines()[-1]
        assert json.loads(line)["record"]["message"] == "message de test"
        logger.remove()

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (0, False, "WARNING"),
            (1, False, "INFO"),
            (2, False, "DEBUG"),
            (5, False, "DEBUG"),
            (2, True, "ERROR"),
        ],
    )
    def test_level_for_verbosity(self, verbose, quiet, expected) -> None:
        assert level_for_verbosity(verbose, quiet, default="warning") == expected

    def test_console_filter_limits_third_party_records(self) -> None:
        accept = console_filter("DEBUG")

        def record(name: str, level: str) -> dict:
            return {"name": name, "level": logger.level(level)}

        assert accept(record("watchlog.services.cloud_sync", "DEBUG"))
        assert not accept(record("httpx", "INFO"))
        assert accept(record("httpx", "WARNING"))
        assert not accept(record("watchlogger", "INFO"))
