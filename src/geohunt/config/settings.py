# src/geohunt/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/geohunt/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GEOHUNT_STORE_PATH`, `GEOHUNT_OPERATOR_IDS`)
- an external YAML file via `GEOHUNT_CONFIG_PATH`

Design rule:
- Game tuning knobs (radius, decay, hint window) live in YAML, not hard-coded in the engine.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from geohunt.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `geohunt.config`."""
    text = resources.files("geohunt.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GeoHunt"
    log_level: str = "INFO"
    log_buffer_size: int = Field(500, ge=1)


class GameSettings(BaseModel):
    radius_m: float = Field(50.0, gt=0)
    default_points: int = Field(100, ge=0)
    decay_step: int = Field(10, ge=0)
    points_floor: int = Field(20, ge=0)
    hint_window: int = Field(5, ge=1)
    completion_message: str = "All questions solved!"

    @model_validator(mode="after")
    def _validate_floor(self) -> "GameSettings":
        if self.points_floor > self.default_points:
            raise ValueError("game.points_floor must not exceed game.default_points")
        return self


class StoreSettings(BaseModel):
    backend: Literal["memory", "json"] = "memory"
    path: str = "data/store"
    seed_path: str | None = None
    timeout_seconds: float = Field(5.0, gt=0)


class AuthSettings(BaseModel):
    operator_id_length: int = Field(28, ge=1)
    operator_ids: list[str] = Field(default_factory=list)


class CorsSettings(BaseModel):
    origins: list[str] = Field(default_factory=list)
    allow_origin_regex: str | None = None


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    game: GameSettings = Field(default_factory=GameSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small; game rules are changed via YAML only.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("GEOHUNT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    backend = os.getenv("GEOHUNT_STORE_BACKEND")
    if backend:
        data.setdefault("store", {})["backend"] = backend.strip().lower()

    store_path = os.getenv("GEOHUNT_STORE_PATH")
    if store_path:
        data.setdefault("store", {})["path"] = store_path

    seed_path = os.getenv("GEOHUNT_SEED_PATH")
    if seed_path:
        data.setdefault("store", {})["seed_path"] = seed_path

    operator_ids = os.getenv("GEOHUNT_OPERATOR_IDS")
    if operator_ids:
        data.setdefault("auth", {})["operator_ids"] = [s.strip() for s in operator_ids.split(",") if s.strip()]

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GEOHUNT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
