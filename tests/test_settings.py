"""Tests for configuration and logging setup."""

import pytest
import structlog
from decimal import Decimal

from finance_tracker import log
from finance_tracker.config import LedgerSettings, LoggingSettings, get_settings
from finance_tracker.log import configure_logging, ensure_logging, get_logger
from finance_tracker.orchestrator import LedgerService


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self, monkeypatch):
        """Test default ledger settings."""
        monkeypatch.delenv("FINANCE_TRACKER_DEFAULT_CURRENCY_CODE", raising=False)
        monkeypatch.delenv("FINANCE_TRACKER_SUPPORTED_CURRENCY_CODES", raising=False)
        settings = LedgerSettings(_env_file=None)
        assert settings.default_currency_code == "HUF"
        assert settings.supported_currencies_list == ["HUF", "EUR", "KZT", "RUB"]
        assert settings.overdraft_warning_threshold == Decimal("0")

    def test_from_environment(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("FINANCE_TRACKER_DEFAULT_CURRENCY_CODE", "eur")
        monkeypatch.setenv("FINANCE_TRACKER_SUPPORTED_CURRENCY_CODES", "eur, usd ,")
        monkeypatch.setenv("FINANCE_TRACKER_OVERDRAFT_WARNING_THRESHOLD", "-50.5")
        settings = LedgerSettings(_env_file=None)
        assert settings.default_currency_code == "EUR"
        assert settings.supported_currencies_list == ["EUR", "USD"]
        assert settings.overdraft_warning_threshold == Decimal("-50.5")

    def test_log_level_validation(self):
        """Test log level normalization and rejection."""
        assert LoggingSettings(log_level="debug", _env_file=None).log_level == "DEBUG"
        with pytest.raises(ValueError):
            LoggingSettings(log_level="loud", _env_file=None)

    def test_get_settings_is_cached(self):
        """Test the settings cache."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        assert isinstance(get_settings().ledger, LedgerSettings)


class TestLogging:
    """Tests for structlog configuration."""

    def test_get_logger(self):
        """Test that configured loggers accept structured events."""
        configure_logging(LoggingSettings(log_level="WARNING", json_logs=False, _env_file=None))
        logger = get_logger("tests")
        logger.info("ignored_event", value=1)
        logger.warning("kept_event", value=2)

    def test_get_logger_leaves_configuration_alone(self, monkeypatch):
        """Test that loggers can be created before logging is configured."""
        monkeypatch.setattr(log, "_configured", False)
        structlog.reset_defaults()

        get_logger("tests").info("early_event")
        assert structlog.is_configured() is False

        LedgerService(settings=LedgerSettings(_env_file=None))
        assert structlog.is_configured() is True
        assert log._configured is True

    def test_ensure_logging_keeps_host_configuration(self, monkeypatch):
        """Test that an application's own structlog setup is not replaced."""
        monkeypatch.setattr(log, "_configured", False)
        structlog.reset_defaults()
        structlog.configure(processors=[structlog.processors.KeyValueRenderer()])

        ensure_logging()
        assert log._configured is False
        assert structlog.get_config()["processors"][0].__class__ is structlog.processors.KeyValueRenderer
