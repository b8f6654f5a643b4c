"""Configuration models and helpers for AlmanacEngine settings."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

CURRENT_SETTINGS_SCHEMA_VERSION = 1

# -------------------- Settings Schema --------------------


class SolverCfg(BaseModel):
    """Apparent-place solver tolerances."""

    light_time_tolerance_days: float = 1.0e-9
    max_light_time_iterations: int = 50

    @field_validator("light_time_tolerance_days", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        numeric = float(value)
        return max(1.0e-15, min(1.0e-3, numeric))

    @field_validator("max_light_time_iterations", mode="before")
    @classmethod
    def _cap_iterations(cls, value: int) -> int:
        return max(1, min(1000, int(value)))


class TransitCfg(BaseModel):
    """Meridian-transit search controls."""

    tolerance_days: float = 1.0e-5
    max_iterations: int = 50

    @field_validator("tolerance_days", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        numeric = float(value)
        return max(1.0e-9, min(1.0e-2, numeric))

    @field_validator("max_iterations", mode="before")
    @classmethod
    def _cap_iterations(cls, value: int) -> int:
        return max(1, min(1000, int(value)))


class CrossingCfg(BaseModel):
    """Altitude-threshold crossing refinement controls."""

    altitude_tolerance_arcmin: float = 0.1
    max_false_position_iterations: int = 20
    max_bisection_iterations: int = 20
    extremum_half_width_minutes: float = 30.0
    strict: bool = True

    @field_validator("altitude_tolerance_arcmin", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        numeric = float(value)
        return max(1.0e-6, min(10.0, numeric))

    @field_validator(
        "max_false_position_iterations", "max_bisection_iterations", mode="before"
    )
    @classmethod
    def _cap_iterations(cls, value: int) -> int:
        return max(1, min(200, int(value)))

    @field_validator("extremum_half_width_minutes", mode="before")
    @classmethod
    def _cap_half_width(cls, value: float) -> float:
        numeric = float(value)
        return max(1.0, min(180.0, numeric))


class EphemerisCfg(BaseModel):
    """Location and caching of the JPL kernel used by the skyfield backend."""

    kernel_path: Optional[str] = None
    cache_size: int = 2048
    emrat: Optional[float] = None

    @field_validator("cache_size", mode="before")
    @classmethod
    def _cap_cache_size(cls, value: int) -> int:
        return max(0, int(value))


class ObservabilityCfg(BaseModel):
    """Metrics and logging switches."""

    metrics_enabled: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return str(value).upper()


class Settings(BaseModel):
    """Root settings object persisted as YAML."""

    schema_version: int = CURRENT_SETTINGS_SCHEMA_VERSION
    solver: SolverCfg = Field(default_factory=SolverCfg)
    transits: TransitCfg = Field(default_factory=TransitCfg)
    crossings: CrossingCfg = Field(default_factory=CrossingCfg)
    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    observability: ObservabilityCfg = Field(default_factory=ObservabilityCfg)


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "config.yaml"


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    if os.name == "nt":
        base = Path(
            os.environ.get(
                "LOCALAPPDATA", str(Path.home() / "AppData" / "Local")
            )
        )
        return base / "AlmanacEngine"
    return Path(
        os.environ.get("ALMANACENGINE_HOME", str(Path.home() / ".almanacengine"))
    )


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _coerce_schema_version(raw: object) -> int:
    """Return a normalised schema version value with sane bounds."""

    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return max(0, value)


def _upgrade_settings_payload(
    data: dict[str, object], *, schema_version: int
) -> tuple[dict[str, object], bool]:
    """Apply in-place upgrades required for older settings payloads."""

    upgraded = deepcopy(data)
    changed = False

    if schema_version < 1:
        # Unversioned files stored the crossing tolerance in degrees.
        crossings = upgraded.get("crossings")
        if isinstance(crossings, dict) and "altitude_tolerance_deg" in crossings:
            crossings = dict(crossings)
            crossings["altitude_tolerance_arcmin"] = (
                float(crossings.pop("altitude_tolerance_deg")) * 60.0
            )
            upgraded["crossings"] = crossings
        changed = True

    if upgraded.get("schema_version") != CURRENT_SETTINGS_SCHEMA_VERSION:
        upgraded["schema_version"] = CURRENT_SETTINGS_SCHEMA_VERSION
        changed = True

    return upgraded, changed


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    schema_version = _coerce_schema_version(raw.get("schema_version"))
    data, upgraded = _upgrade_settings_payload(raw, schema_version=schema_version)
    settings = Settings(**data)
    if upgraded:
        save_settings(settings, source_path)
    return settings


def ensure_default_config() -> Path:
    """Create the default configuration file if it does not exist."""

    path = config_path()
    if not path.exists():
        save_settings(default_settings(), path)
    return path


__all__ = [
    "CONFIG_FILENAME",
    "CURRENT_SETTINGS_SCHEMA_VERSION",
    "CrossingCfg",
    "EphemerisCfg",
    "ObservabilityCfg",
    "Settings",
    "SolverCfg",
    "TransitCfg",
    "config_path",
    "default_settings",
    "ensure_default_config",
    "get_config_home",
    "load_settings",
    "save_settings",
]
