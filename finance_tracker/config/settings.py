"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger core itself takes no configuration; these settings drive the
service layer (accepted currencies, overdraft warnings) and logging.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency_code: str = Field(
        default="HUF",
        pattern=r"^[A-Z]{3}$",
        description="Currency used when an account is opened without one"
    )
    supported_currency_codes: str = Field(
        default="HUF,EUR,KZT,RUB",
        description="Comma-separated list of currency codes accounts may use"
    )
    overdraft_warning_threshold: Decimal = Field(
        default=Decimal("0"),
        description="Balances below this value are reported as warnings"
    )

    @field_validator('default_currency_code', mode='before')
    @classmethod
    def upper_currency(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def supported_currencies_list(self) -> list[str]:
        """Get supported currency codes as a list."""
        return [
            code.strip().upper()
            for code in self.supported_currency_codes.split(",")
            if code.strip()
        ]


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for emitted log records"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (False gives console output)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
