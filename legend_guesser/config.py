"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_PATH = BASE_DIR / "data" / "players.csv"


@dataclass(frozen=True)
class Settings:
    data_path: Path = DEFAULT_DATA_PATH
    session_ttl_minutes: int = 30
    stats_sample_size: int = 250
    log_level: str = "INFO"


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"Environment variable {key} must be positive, got {value}")
    return value


def load_settings() -> Settings:
    data_path = os.getenv("LEGEND_DATA_PATH")
    return Settings(
        data_path=Path(data_path) if data_path else DEFAULT_DATA_PATH,
        session_ttl_minutes=_int_env("LEGEND_SESSION_TTL_MINUTES", 30),
        stats_sample_size=_int_env("LEGEND_STATS_SAMPLE_SIZE", 250),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
