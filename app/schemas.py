"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import AlertClassification, AlertLevel, FieldStatus, SensorReading, StatusColor
from models.thresholds import ThresholdTable


class SensorReadingPayload(BaseModel):
    """Snapshot published on the feed; extra keys are ignored."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    temperature: float = Field(..., description="Air temperature in °C.")
    humidity: float = Field(..., description="Relative humidity in %.")
    distance_cm: float = Field(..., description="Distance from sensor to water surface in cm.")
    flow_rate_lpm: float = Field(..., description="Water flow rate in L/min.")

    def to_reading(self) -> SensorReading:
        return SensorReading(
            temperature=self.temperature,
            humidity=self.humidity,
            distance_cm=self.distance_cm,
            flow_rate_lpm=self.flow_rate_lpm,
        )

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "SensorReadingPayload":
        return cls(
            temperature=reading.temperature,
            humidity=reading.humidity,
            distance_cm=reading.distance_cm,
            flow_rate_lpm=reading.flow_rate_lpm,
        )


class Classification(BaseModel):
    level: AlertLevel
    message: str
    color: StatusColor

    @classmethod
    def from_domain(cls, classification: AlertClassification) -> "Classification":
        return cls(
            level=classification.level,
            message=classification.message,
            color=classification.color,
        )


class FieldStatusModel(BaseModel):
    field: str
    label: str
    unit: str
    value: float
    color: StatusColor
    gauge_percent: float = Field(..., ge=0, le=100)

    @classmethod
    def from_domain(cls, status: FieldStatus) -> "FieldStatusModel":
        return cls(
            field=status.field,
            label=status.label,
            unit=status.unit,
            value=status.value,
            color=status.color,
            gauge_percent=status.gauge_percent,
        )


class MonitorSnapshot(BaseModel):
    """Latest reading and its classification, replaced on every accepted update."""

    reading: Optional[SensorReadingPayload] = None
    classification: Classification
    sensors: List[FieldStatusModel] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
    accepted_updates: int = Field(default=0, ge=0)
    rejected_updates: int = Field(default=0, ge=0)
    last_rejection: Optional[str] = Field(
        default=None, description="Reason the most recent rejected update was dropped."
    )


class ThresholdModel(BaseModel):
    warning: float
    danger: float
    inverted: bool


class ThresholdReport(BaseModel):
    feed_path: str
    backend: str
    thresholds: Dict[str, ThresholdModel]
    inconsistent_fields: List[str] = Field(default_factory=list)

    @classmethod
    def from_table(cls, table: ThresholdTable, feed_path: str, backend: str) -> "ThresholdReport":
        return cls(
            feed_path=feed_path,
            backend=backend,
            thresholds={
                name: ThresholdModel(
                    warning=threshold.warning,
                    danger=threshold.danger,
                    inverted=threshold.inverted,
                )
                for name, threshold in table.items()
            },
            inconsistent_fields=table.inconsistent_fields(),
        )
