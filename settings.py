from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional, Tuple


_FEED_BACKEND_ENV = "FEED_BACKEND"
_FEED_PATH_ENV = "FEED_PATH"
_FIREBASE_URL_ENV = "FIREBASE_DATABASE_URL"
_FIREBASE_CREDENTIALS_ENV = "FIREBASE_CREDENTIALS_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_LOG_FILE_ENV = "LOG_FILE"
_MOCK_SEED_ENV = "MOCK_FEED_SEED_PATH"
_THRESHOLD_ENV_TEMPLATE = "THRESHOLD_{field}_{tier}"

_SUPPORTED_BACKENDS = ("mock", "firebase")
_THRESHOLD_FIELDS = ("temperature", "humidity", "distance_cm", "flow_rate_lpm")


@dataclass(frozen=True)
class Settings:
    feed_backend: str
    feed_path: str
    firebase_database_url: Optional[str]
    firebase_credentials_path: str
    log_level: str
    log_file: Optional[str] = None
    mock_seed_path: Optional[str] = None
    threshold_overrides: Dict[str, Dict[str, float]] = field(default_factory=dict)


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_FEED_BACKEND_ENV, default).lower()
    return candidate if candidate in _SUPPORTED_BACKENDS else default


def _read_feed_path(default: str) -> str:
    candidate = _read_str_env(_FEED_PATH_ENV, default)
    return "/" + candidate.strip("/")


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = float(candidate)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _read_threshold_overrides(fields: Tuple[str, ...]) -> Dict[str, Dict[str, float]]:
    overrides: Dict[str, Dict[str, float]] = {}
    for name in fields:
        for tier in ("warning", "danger"):
            env_name = _THRESHOLD_ENV_TEMPLATE.format(field=name.upper(), tier=tier.upper())
            parsed = _read_float(env_name)
            if parsed is None:
                continue
            overrides.setdefault(name, {})[tier] = parsed
    return overrides


@lru_cache
def get_settings() -> Settings:
    return Settings(
        feed_backend=_read_backend("mock"),
        feed_path=_read_feed_path("/sensors"),
        firebase_database_url=_read_optional_env(_FIREBASE_URL_ENV, None),
        firebase_credentials_path=_read_str_env(_FIREBASE_CREDENTIALS_ENV, "./firebase-key.json"),
        log_level=_read_log_level("INFO"),
        log_file=_read_optional_env(_LOG_FILE_ENV, None),
        mock_seed_path=_read_optional_env(_MOCK_SEED_ENV, None),
        threshold_overrides=_read_threshold_overrides(_THRESHOLD_FIELDS),
    )
