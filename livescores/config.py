"""Load .env and settings.yaml, expose all configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _load_env() -> None:
    env_path = PROJECT_ROOT / ".env"
    load_dotenv(env_path)


def _load_yaml() -> dict:
    settings_path = PROJECT_ROOT / "settings.yaml"
    if settings_path.exists():
        try:
            with open(settings_path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError:
            log.warning("Failed to parse settings.yaml, using defaults")
            return {}
    return {}


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    default_sport: str = "cfb"

    @field_validator("default_sport")
    @classmethod
    def lower_sport(cls, v: str) -> str:
        return v.strip().lower()
    timezone: str = "America/New_York"

    # Freshness tiers, seconds. Live games change every play, idle boards barely move.
    live_ttl: float = 20.0
    idle_ttl: float = 120.0
    poll_interval: float = 5.0
    upstream_timeout: float = 10.0

    send_timeout: float = 2.0
    subscriber_queue_size: int = 32
    keepalive_interval: float = 15.0
    max_cache_entries: int = 256
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @model_validator(mode="after")
    def check_ttl_tiers(self) -> Settings:
        if self.live_ttl >= self.idle_ttl:
            raise ValueError("live_ttl must be shorter than idle_ttl")
        return self


def load_settings() -> Settings:
    _load_env()
    raw = _load_yaml()
    port = os.getenv("PORT")
    if port:
        raw["port"] = int(port)
    level = os.getenv("LOG_LEVEL")
    if level:
        raw["log_level"] = level
    return Settings(**raw)
