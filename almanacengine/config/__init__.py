"""Configuration helpers exposed at :mod:`almanacengine.config`."""

from __future__ import annotations

from .settings import (
    CrossingCfg,
    EphemerisCfg,
    ObservabilityCfg,
    Settings,
    SolverCfg,
    TransitCfg,
    config_path,
    default_settings,
    ensure_default_config,
    get_config_home,
    load_settings,
    save_settings,
)

__all__ = [
    "Settings",
    "SolverCfg",
    "TransitCfg",
    "CrossingCfg",
    "EphemerisCfg",
    "ObservabilityCfg",
    "config_path",
    "get_config_home",
    "default_settings",
    "load_settings",
    "save_settings",
    "ensure_default_config",
]
