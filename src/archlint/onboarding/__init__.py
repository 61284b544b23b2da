"""Onboarding: architecture presets and config generation."""

from archlint.onboarding.presets import (
    DDD,
    HEXAGONAL,
    PRESETS,
    SIMPLE,
    Preset,
    create_config_from_preset,
    create_default_config,
    get_preset,
    refresh_config,
)

__all__ = [
    "DDD",
    "HEXAGONAL",
    "PRESETS",
    "SIMPLE",
    "Preset",
    "create_config_from_preset",
    "create_default_config",
    "get_preset",
    "refresh_config",
]
