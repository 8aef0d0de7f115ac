"""Configuration settings using Pydantic Settings.

Provides typed configuration for the composition engine with environment
variable support.

Usage:
    from encapsulate.config import CompositionSettings, get_settings

    # Load from environment variables (ENCAPSULATE_*)
    settings = get_settings()

    # Or override with explicit values
    settings = CompositionSettings(warn_on_shadow=False)
    apply(Person, HasName, settings=settings)
"""

from __future__ import annotations

import logging

try:
    from pydantic import field_validator
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install pydantic-settings"
    ) from e


class CompositionSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for behavior application and safekeeping.

    Attributes:
        warn_on_shadow: Emit a UserWarning when an application replaces a
            method installed by an earlier application.
        thread_safe: Guard context creation with a lock.
        log_level: Level applied to the package logger by configure_logging().

    Environment Variables:
        ENCAPSULATE_WARN_ON_SHADOW
        ENCAPSULATE_THREAD_SAFE
        ENCAPSULATE_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCAPSULATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    warn_on_shadow: bool = True
    thread_safe: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


_settings: CompositionSettings | None = None


def get_settings() -> CompositionSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = CompositionSettings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling it again only updates the level.

    Args:
        level: Log level name. Defaults to the configured log_level.

    Returns:
        The package logger.
    """
    package_logger = logging.getLogger("encapsulate")
    if not any(getattr(h, "_encapsulate_handler", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._encapsulate_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
    package_logger.setLevel((level or get_settings().log_level).upper())
    return package_logger
