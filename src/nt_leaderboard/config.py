"""nt_leaderboard configuration helpers."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from nt_leaderboard.errors import ConfigError
from nt_leaderboard.paths import data_dir, repo_file

logger = logging.getLogger(__name__)

SPEED_METHODS = ("weighted", "snapshot")
DEFAULT_ANOMALY_THRESHOLD = 2600

ENV_OVERRIDES = {
    "NT_ANOMALY_THRESHOLD": "anomaly_threshold",
    "NT_SPEED_METHOD": "speed_method",
    "NT_SOURCE_ROOT": "source_root",
    "NT_TIMEOUT_SEC": "timeout_sec",
    "NT_ROTATE_SOURCE_URL": "rotate_source_url",
}


@dataclass(frozen=True)
class Settings:
    anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD
    speed_method: str = "weighted"
    source_root: str = dataclasses.field(default_factory=lambda: str(data_dir()))
    data_current: str = "AfterEventData.json"
    data_previous: str = "BeforeEventData.json"
    api_before: str = "API_before.ndjson"
    api_now: str = "API_now.ndjson"
    event_data_before: str = "BeforeEventData.json"
    event_data_now: str = "AfterEventData.json"
    timeout_sec: int = 15
    max_workers: int = 4
    output_path: str = "views.json"
    rotate_source_url: str | None = None
    rotate_current: str = "sample_data.json"
    rotate_previous: str = "sample_data_prev.json"


def _coerce_int(name: str, value: Any, *, minimum: int = 1) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
    if number < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {number}")
    return number


def validate_speed_method(value: Any) -> str:
    method = str(value or "").strip().lower()
    if method not in SPEED_METHODS:
        raise ConfigError(f"speed_method must be one of {', '.join(SPEED_METHODS)}, got {value!r}")
    return method


def _coerce_field(name: str, value: Any) -> Any:
    if name == "speed_method":
        return validate_speed_method(value)
    if name in {"anomaly_threshold", "timeout_sec", "max_workers"}:
        return _coerce_int(name, value)
    if name == "rotate_source_url":
        text = str(value or "").strip()
        return text or None
    return str(value)


def settings_from_mapping(data: Mapping[str, Any] | None, base: Settings | None = None) -> Settings:
    """Overlay known keys from ``data`` onto ``base`` (or defaults)."""
    settings = base or Settings()
    known = {field.name for field in dataclasses.fields(Settings)}
    updates: dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key not in known:
            logger.warning("ignoring unknown setting %r", key)
            continue
        if value is None and key != "rotate_source_url":
            continue
        updates[key] = _coerce_field(key, value)
    return dataclasses.replace(settings, **updates)


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = path or repo_file("config.yaml")
    if not config_path.is_file():
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping of settings")
    return data


def apply_environment_overrides(settings: Settings) -> Settings:
    overrides = {
        field_name: os.environ[env_name]
        for env_name, field_name in ENV_OVERRIDES.items()
        if os.getenv(env_name)
    }
    if not overrides:
        return settings
    return settings_from_mapping(overrides, base=settings)


def load_settings(path: Path | None = None) -> Settings:
    return settings_from_mapping(load_config_file(path))


def load_and_apply_settings(path: Path | None = None) -> Settings:
    return apply_environment_overrides(load_settings(path))


def configure_runtime(path: Path | None = None) -> Settings:
    load_dotenv()
    return load_and_apply_settings(path)
