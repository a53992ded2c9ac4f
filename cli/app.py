from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_classification, render_status, render_thresholds, terminal_color
from models.records import SensorReading
from services.classifier import AlertClassifier


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the flood alert monitor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _reading_options(
    temperature: float, humidity: float, distance: float, flow_rate: float
) -> Dict[str, float]:
    return {
        "temperature": temperature,
        "humidity": humidity,
        "distance_cm": distance,
        "flow_rate_lpm": flow_rate,
    }


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between status checks when watching.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Maximum seconds to keep watching.",
    ),
    color: Optional[bool] = typer.Option(
        None,
        "--color/--no-color",
        help="Colour statuses in the terminal (defaults to on unless NO_COLOR is set).",
    ),
) -> None:
    """Entry point for the CLI."""
    try:
        config = load_config(
            base_url=base_url,
            poll_interval=poll_interval,
            poll_timeout=timeout,
            color=color,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the latest reading and its alert level."""
    state = _get_state(ctx)
    render_status(state.client.get_status(), color=state.config.color)


@app.command("push")
def push_command(
    ctx: typer.Context,
    temperature: float = typer.Option(..., "--temperature", help="Temperature in °C."),
    humidity: float = typer.Option(..., "--humidity", help="Relative humidity in %."),
    distance: float = typer.Option(..., "--distance", help="Distance to water surface in cm."),
    flow_rate: float = typer.Option(..., "--flow-rate", help="Flow rate in L/min."),
) -> None:
    """Publish a reading on the monitored feed path."""
    state = _get_state(ctx)
    reading = _reading_options(temperature, humidity, distance, flow_rate)
    typer.echo(f"Publishing reading to {state.config.base_url} ...")
    payload = state.client.push_reading(reading)
    typer.secho("Reading accepted.", fg=typer.colors.GREEN)
    typer.echo()
    render_status(payload, color=state.config.color)


@app.command("watch")
def watch_command(ctx: typer.Context) -> None:
    """Print the status whenever the alert level changes."""
    state = _get_state(ctx)
    interval = state.config.poll_interval
    timeout = state.config.poll_timeout
    typer.echo(f"Watching {state.config.base_url} (interval={interval}s, timeout={timeout}s)...")
    for payload in state.client.watch_status(interval=interval, timeout=timeout):
        typer.echo()
        render_status(payload, color=state.config.color)


@app.command("thresholds")
def thresholds_command(ctx: typer.Context) -> None:
    """Show the thresholds the server classifies with."""
    state = _get_state(ctx)
    render_thresholds(state.client.get_thresholds())


@app.command("classify")
def classify_command(
    ctx: typer.Context,
    temperature: float = typer.Option(..., "--temperature", help="Temperature in °C."),
    humidity: float = typer.Option(..., "--humidity", help="Relative humidity in %."),
    distance: float = typer.Option(..., "--distance", help="Distance to water surface in cm."),
    flow_rate: float = typer.Option(..., "--flow-rate", help="Flow rate in L/min."),
) -> None:
    """Classify a reading locally with the default thresholds (no server needed)."""
    state = _get_state(ctx)
    classifier = AlertClassifier()
    reading = SensorReading(**_reading_options(temperature, humidity, distance, flow_rate))
    result = classifier.classify(reading)
    render_classification(
        {"level": result.level.value, "message": result.message, "color": result.color.value},
        color=state.config.color,
    )
    for status in classifier.field_statuses(reading):
        fg = terminal_color(status.color.value) if state.config.color else None
        typer.secho(f"  {status.label}: {status.value:.1f} {status.unit}", fg=fg)
