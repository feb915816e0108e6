"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .models import PremiumLevel, premium_level
from .rendering import SUMMARY_URL

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def env_int(name: str, *, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, *, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True, slots=True)
class EnvironmentConfig:
    discord_token: str
    giveaway_table_name: str
    aws_region: str
    summary_channel_id: int | None
    premium_level: PremiumLevel
    sweep_interval: float
    sweep_workers: int
    summary_url: str
    log_level: str
    sync_commands: bool

    @classmethod
    def load(cls) -> EnvironmentConfig:
        missing: list[str] = []

        def need(name: str) -> str:
            value = os.getenv(name)
            if not value:
                missing.append(name)
                return ""
            return value

        discord_token = need("DISCORD_TOKEN")
        giveaway_table_name = need("GIVEAWAY_TABLE_NAME")

        if missing:
            raise RuntimeError("Missing env vars: " + ", ".join(sorted(set(missing))))

        try:
            level = premium_level(os.getenv("PREMIUM_LEVEL"))
        except ValueError as exc:
            raise RuntimeError(str(exc)) from exc

        workers = env_int("SWEEP_WORKERS", default=4) or 4
        return cls(
            discord_token=discord_token,
            giveaway_table_name=giveaway_table_name,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            summary_channel_id=env_int("SUMMARY_CHANNEL_ID"),
            premium_level=level,
            sweep_interval=env_float("SWEEP_INTERVAL_SECONDS", default=1.0),
            sweep_workers=max(workers, 1),
            summary_url=os.getenv("SUMMARY_URL") or SUMMARY_URL,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            sync_commands=env_bool("SYNC_COMMANDS", default=True),
        )


__all__ = ["EnvironmentConfig", "env_bool", "env_float", "env_int"]
