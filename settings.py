from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_WORKER_COUNT_ENV = "CLEAN_TX_WORKER_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_WORKER_COUNT = 4


@dataclass(frozen=True)
class Settings:
    worker_count: int
    log_level: str


def _read_worker_count(default: int) -> int:
    value = os.getenv(_WORKER_COUNT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        worker_count=_read_worker_count(DEFAULT_WORKER_COUNT),
        log_level=_read_log_level("INFO"),
    )
