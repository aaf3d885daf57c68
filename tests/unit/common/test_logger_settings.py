"""Tests for logging setup and application settings."""

import logging
import os

import pytest

from inspectra.common.logger import configure_logging, get_logger, setup_logger
from inspectra.core.config import Settings
from inspectra.db.session import engine_from_settings


class TestSetupLogger:
    def test_file_and_console_handlers(self, tmp_path):
        logger = setup_logger("inspectra-test-files", log_dir=str(tmp_path), level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        logger.info("hello")
        assert os.path.exists(tmp_path / "inspectra-test-files.log")

    def test_console_only(self, tmp_path):
        logger = setup_logger("inspectra-test-console", log_dir=str(tmp_path), file_logging=False)

        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
        assert not os.listdir(tmp_path)

    def test_no_duplicate_handlers(self, tmp_path):
        setup_logger("inspectra-test-dupes", log_dir=str(tmp_path), file_logging=False)
        logger = setup_logger("inspectra-test-dupes", log_dir=str(tmp_path), file_logging=False)

        assert len(logger.handlers) == 1

    def test_invalid_level(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger("inspectra-test-bad", log_dir=str(tmp_path), level="LOUD")

    def test_get_logger(self):
        assert get_logger("inspectra.api") is logging.getLogger("inspectra.api")


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("INSPECTRA_STORE_BACKEND", raising=False)
        settings = Settings(_env_file=None)

        assert settings.app_name == "Inspectra"
        assert settings.store_backend == "sql"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("INSPECTRA_STORE_BACKEND", "memory")
        monkeypatch.setenv("INSPECTRA_CORS_ORIGINS", "http://a.test, http://b.test")

        settings = Settings(_env_file=None)

        assert settings.store_backend == "memory"
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestConfigureLogging:
    def test_quiets_third_party_loggers(self, tmp_path):
        settings = Settings(_env_file=None, log_dir=str(tmp_path), log_level="warning")

        logger = configure_logging(settings)

        assert logger.name == "inspectra"
        assert logger.level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestEngineFromSettings:
    def test_importing_session_builds_no_engine(self):
        import inspectra.db.session as session

        assert not hasattr(session, "engine")

    def test_engine_uses_configured_url(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'inspectra.db'}"
        settings = Settings(_env_file=None, database_url=url)

        engine = engine_from_settings(settings)

        assert str(engine.url) == url
        engine.dispose()
