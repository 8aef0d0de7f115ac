"""Configuration module using Pydantic Settings.

Usage:
    from encapsulate.config import CompositionSettings, get_settings

    settings = CompositionSettings(warn_on_shadow=False)
"""

from encapsulate.config.settings import (
    CompositionSettings,
    configure_logging,
    get_settings,
    reset_settings,
)

__all__ = [
    "CompositionSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
]
