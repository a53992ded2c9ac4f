from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

from models.records import StatusColor

_TERMINAL_COLORS = {
    StatusColor.green.value: typer.colors.GREEN,
    StatusColor.orange.value: typer.colors.YELLOW,
    StatusColor.red.value: typer.colors.RED,
}

_LEVEL_MARKERS = {
    "critical": "[!!]",
    "warning": "[!]",
    "caution": "[!]",
}


def terminal_color(color_key: Optional[str]) -> Optional[str]:
    if color_key is None:
        return None
    return _TERMINAL_COLORS.get(color_key.upper())


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_classification(classification: Dict[str, Any], color: bool = True) -> None:
    level = str(classification.get("level") or "normal")
    marker = _LEVEL_MARKERS.get(level, "[ok]")
    fg = terminal_color(classification.get("color")) if color else None
    typer.secho(f"{marker} System Status: {level.upper()}", fg=fg, bold=True)
    typer.echo(classification.get("message") or "")


def render_status(payload: Dict[str, Any], color: bool = True) -> None:
    render_classification(payload.get("classification") or {}, color=color)
    typer.echo()
    echo_heading("Sensor Readings")
    sensors = payload.get("sensors") or []
    if not sensors:
        typer.echo("Loading sensor data... (no reading received yet)")
    for sensor in sensors:
        fg = terminal_color(sensor.get("color")) if color else None
        value = sensor.get("value")
        shown = f"{value:.1f}" if isinstance(value, (int, float)) else value
        typer.secho(f"  {sensor.get('label')}: {shown} {sensor.get('unit')}", fg=fg)

    typer.echo()
    echo_key_values(
        [
            ("updated_at", payload.get("updated_at")),
            ("accepted_updates", payload.get("accepted_updates")),
            ("rejected_updates", payload.get("rejected_updates")),
        ]
    )
    if payload.get("last_rejection"):
        typer.secho(f"last_rejection: {payload['last_rejection']}", fg=typer.colors.YELLOW if color else None)


def render_thresholds(payload: Dict[str, Any]) -> None:
    echo_heading(f"Thresholds for {payload.get('feed_path')} ({payload.get('backend')})")
    for name, threshold in (payload.get("thresholds") or {}).items():
        polarity = "lower is riskier" if threshold.get("inverted") else "higher is riskier"
        typer.echo(
            f"  - {name}: warning={threshold.get('warning')} danger={threshold.get('danger')} ({polarity})"
        )
    inconsistent = payload.get("inconsistent_fields") or []
    if inconsistent:
        typer.secho(
            f"Inconsistent thresholds (danger before warning): {', '.join(inconsistent)}",
            fg=typer.colors.YELLOW,
        )
