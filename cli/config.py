"""Client-side settings for the ``flood-monitor`` CLI."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_TIMEOUT = 60.0

_ENV_BASE_URL = "API_BASE_URL"
_ENV_POLL_INTERVAL = "CLI_POLL_INTERVAL"
_ENV_POLL_TIMEOUT = "CLI_POLL_TIMEOUT"
_ENV_NO_COLOR = "NO_COLOR"


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


@dataclass(frozen=True)
class CLIConfig:
    """Where the monitor API lives and how ``watch`` polls it."""

    base_url: str = DEFAULT_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_POLL_TIMEOUT
    color: bool = True

    def __post_init__(self) -> None:
        for name in ("poll_interval", "poll_timeout"):
            value = getattr(self, name)
            if not _is_positive(value):
                label = name.replace("_", " ")
                raise ValueError(f"{label} must be a positive number of seconds, got {value!r}")


def _env_seconds(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        parsed = float(raw)
    except ValueError:
        return default
    return parsed if _is_positive(parsed) else default


def _monitor_url(base_url: Optional[str]) -> str:
    url = (base_url or os.getenv(_ENV_BASE_URL) or "").strip() or DEFAULT_BASE_URL
    return url.rstrip("/")


def load_config(
    base_url: Optional[str] = None,
    poll_interval: Optional[float] = None,
    poll_timeout: Optional[float] = None,
    color: Optional[bool] = None,
) -> CLIConfig:
    """Merge command-line values over the environment.

    Explicit values are checked by :class:`CLIConfig` and raise ``ValueError``
    when unusable. Environment values that are not positive numbers are ignored.
    """
    if poll_interval is None:
        poll_interval = _env_seconds(_ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)
    if poll_timeout is None:
        poll_timeout = _env_seconds(_ENV_POLL_TIMEOUT, DEFAULT_POLL_TIMEOUT)
    if color is None:
        # https://no-color.org: any non-empty value disables colour
        color = not os.getenv(_ENV_NO_COLOR)
    return CLIConfig(
        base_url=_monitor_url(base_url),
        poll_interval=poll_interval,
        poll_timeout=poll_timeout,
        color=color,
    )
