"""Configuration loading utilities for collectpoints."""

from .schema import (
    CollectionSettings,
    SessionConfig,
    apply_settings,
    load_config,
    load_settings,
    save_settings,
    settings_from_config,
)

__all__ = [
    "CollectionSettings",
    "SessionConfig",
    "apply_settings",
    "load_config",
    "load_settings",
    "save_settings",
    "settings_from_config",
]
