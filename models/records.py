"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AlertLevel(str, Enum):
    """Overall flood-risk severity, ordered by increasing risk."""

    normal = "normal"
    caution = "caution"
    warning = "warning"
    critical = "critical"


class StatusColor(str, Enum):
    """Colour keys handed to whatever renders a classification."""

    green = "#4CAF50"
    orange = "#FF9800"
    red = "#F44336"


@dataclass(frozen=True, slots=True)
class SensorReading:
    """One snapshot of the four sensors published on the feed."""

    temperature: float
    humidity: float
    distance_cm: float
    flow_rate_lpm: float


@dataclass(frozen=True, slots=True)
class AlertClassification:
    level: AlertLevel
    message: str
    color: StatusColor


@dataclass(frozen=True, slots=True)
class FieldStatus:
    """Display status of a single sensor field."""

    field: str
    label: str
    unit: str
    value: float
    color: StatusColor
    gauge_percent: float
