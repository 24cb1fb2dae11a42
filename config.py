from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError


class GrowthModelConfig(BaseModel):
    initial_referrers: float = Field(default=100.0, ge=0)
    referral_capacity: float = Field(default=10.0, gt=0)


class SearchBoundsConfig(BaseModel):
    max_days: int = Field(default=10000, ge=0)
    max_bonus: int = Field(default=10000, ge=0)
    bonus_increment: int = Field(default=10, gt=0)


def _default_audit_db_url() -> str:
    return os.getenv("REFERRAL_AUDIT_DB_URL", "sqlite:///:memory:")


class AnalyticsConfig(BaseModel):
    growth: GrowthModelConfig = GrowthModelConfig()
    search: SearchBoundsConfig = SearchBoundsConfig()
    audit_db_url: str = Field(default_factory=_default_audit_db_url)


class ConfigError(Exception):
    pass


def deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path, overrides: Dict[str, Any] | None = None) -> AnalyticsConfig:
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    if overrides:
        data = deep_merge(data, overrides)
    try:
        return AnalyticsConfig(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def dump_config(cfg: AnalyticsConfig, path: str | Path) -> None:
    path = Path(path)
    path.write_text(yaml.safe_dump(cfg.model_dump(), sort_keys=False))
