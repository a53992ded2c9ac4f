"""Flood-risk classification for sensor readings."""

from __future__ import annotations

from typing import List, Optional

from models.records import AlertClassification, AlertLevel, FieldStatus, SensorReading, StatusColor
from models.thresholds import (
    DEFAULT_THRESHOLDS,
    DISTANCE_CM,
    FLOW_RATE_LPM,
    HUMIDITY,
    SENSOR_FIELDS,
    TEMPERATURE,
    ThresholdTable,
)

NO_DATA_MESSAGE = "No data available"
CRITICAL_MESSAGE = "CRITICAL ALERT: All parameters indicate severe flood risk!"
WARNING_MESSAGE = "WARNING: Water levels and flow rate indicate high flood risk!"
CAUTION_MESSAGE = "CAUTION: Environmental conditions may lead to flooding!"
NORMAL_MESSAGE = "All parameters normal"

FIELD_LABELS = {
    TEMPERATURE: ("Temperature", "°C"),
    HUMIDITY: ("Humidity", "%"),
    DISTANCE_CM: ("Water Level", "cm"),
    FLOW_RATE_LPM: ("Flow Rate", "L/min"),
}


def gauge_percent(field: str, value: float) -> float:
    """Fill ratio (0-100) of a field's gauge bar."""
    if field == HUMIDITY:
        return max(0.0, min(value, 100.0))
    if field == TEMPERATURE:
        return max(0.0, min(value / 50 * 100, 100.0))
    if field == DISTANCE_CM:
        return min(100.0, max(0.0, 100 - value / 30 * 100))
    return max(0.0, min(value / 25 * 100, 100.0))


class AlertClassifier:
    """Pure classification component that can be unit tested in isolation."""

    def __init__(self, thresholds: ThresholdTable = DEFAULT_THRESHOLDS) -> None:
        self.thresholds = thresholds

    def classify(self, reading: Optional[SensorReading]) -> AlertClassification:
        if reading is None:
            return AlertClassification(AlertLevel.normal, NO_DATA_MESSAGE, StatusColor.green)

        table = self.thresholds
        temp_danger = table[TEMPERATURE].reaches_danger(reading.temperature)
        humidity_danger = table[HUMIDITY].reaches_danger(reading.humidity)
        distance_danger = table[DISTANCE_CM].reaches_danger(reading.distance_cm)
        flow_danger = table[FLOW_RATE_LPM].reaches_danger(reading.flow_rate_lpm)

        if temp_danger and humidity_danger and distance_danger and flow_danger:
            return AlertClassification(AlertLevel.critical, CRITICAL_MESSAGE, StatusColor.red)

        if distance_danger and flow_danger:
            return AlertClassification(AlertLevel.warning, WARNING_MESSAGE, StatusColor.orange)

        if (
            reading.temperature >= table[TEMPERATURE].warning
            and reading.humidity >= table[HUMIDITY].warning
        ):
            return AlertClassification(AlertLevel.caution, CAUTION_MESSAGE, StatusColor.orange)

        return AlertClassification(AlertLevel.normal, NORMAL_MESSAGE, StatusColor.green)

    def status_color(self, field: str, value: float) -> StatusColor:
        """Colour for one field's value, independent of the overall level."""
        threshold = self.thresholds[field]
        if threshold.reaches_danger(value):
            return StatusColor.red
        if threshold.reaches_warning(value):
            return StatusColor.orange
        return StatusColor.green

    def field_statuses(self, reading: SensorReading) -> List[FieldStatus]:
        statuses: List[FieldStatus] = []
        for field in SENSOR_FIELDS:
            value = getattr(reading, field)
            label, unit = FIELD_LABELS[field]
            statuses.append(
                FieldStatus(
                    field=field,
                    label=label,
                    unit=unit,
                    value=value,
                    color=self.status_color(field, value),
                    gauge_percent=gauge_percent(field, value),
                )
            )
        return statuses
