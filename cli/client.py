from __future__ import annotations

import time
from typing import Any, Dict, Iterator, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the flood alert monitor."""

    def __init__(self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=30.0, transport=transport)

    def close(self) -> None:
        self._client.close()

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/status")

    def get_thresholds(self) -> Dict[str, Any]:
        return self._request("GET", "/thresholds")

    def push_reading(self, reading: Dict[str, float]) -> Dict[str, Any]:
        return self._request("POST", "/readings", json=reading)

    def watch_status(self, interval: float, timeout: float) -> Iterator[Dict[str, Any]]:
        """Yield the status each time its alert level changes, until ``timeout``."""
        deadline = time.monotonic() + timeout
        last_level: str | None = None
        while time.monotonic() <= deadline:
            payload = self.get_status()
            level = (payload.get("classification") or {}).get("level")
            if level != last_level:
                last_level = level
                yield payload
            time.sleep(interval)

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        payload = response.json()
        if not isinstance(payload, dict):
            raise typer.BadParameter(f"Unexpected response payload from {url}.")
        return payload

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
