"""Tests for settings and logging setup."""

import logging

from payroll_core.config import Settings
from payroll_core.log_config import configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "DATABASE_URL",
            "PORT",
            "DEBUG",
            "LOG_LEVEL",
            "PAYROLL_MIN_YEAR",
            "PAYROLL_MAX_YEAR",
            "PAYROLL_RUNS_LIMIT",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.port == 8000
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert (settings.payroll_min_year, settings.payroll_max_year) == (2000, 2100)
        assert settings.runs_limit == 12

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PAYROLL_MIN_YEAR", "2020")
        monkeypatch.setenv("PAYROLL_PAYSLIPS_LIMIT", "6")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite+aiosqlite:///:memory:"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.payroll_min_year == 2020
        assert settings.payslips_limit == 6


class TestConfigureLogging:
    def test_single_handler(self):
        logger = logging.getLogger("payroll_core")
        before = len(logger.handlers)

        configure_logging("INFO")
        configure_logging("DEBUG")

        assert len(logger.handlers) <= before + 1
        assert logger.level == logging.DEBUG
