"""Static two-tier thresholds for each monitored sensor field."""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

TEMPERATURE = "temperature"
HUMIDITY = "humidity"
DISTANCE_CM = "distance_cm"
FLOW_RATE_LPM = "flow_rate_lpm"

SENSOR_FIELDS = (TEMPERATURE, HUMIDITY, DISTANCE_CM, FLOW_RATE_LPM)


@dataclass(frozen=True)
class Threshold:
    """Warning and danger cut-offs for one field.

    ``inverted`` marks fields where a lower value means higher risk, such as the
    distance between the sensor and the water surface.
    """

    warning: float
    danger: float
    inverted: bool = False

    def reaches_danger(self, value: float) -> bool:
        if self.inverted:
            return value <= self.danger
        return value >= self.danger

    def reaches_warning(self, value: float) -> bool:
        if self.inverted:
            return value <= self.warning
        return value >= self.warning

    @property
    def is_consistent(self) -> bool:
        """True when the danger tier lies beyond the warning tier."""
        if self.inverted:
            return self.danger <= self.warning
        return self.danger >= self.warning


class ThresholdTable(Mapping[str, Threshold]):
    """Read-only mapping of field name to :class:`Threshold`."""

    def __init__(self, thresholds: Mapping[str, Threshold]) -> None:
        missing = [name for name in SENSOR_FIELDS if name not in thresholds]
        if missing:
            raise ValueError(f"Threshold table missing fields: {', '.join(missing)}")
        self._thresholds = MappingProxyType(dict(thresholds))

    def __getitem__(self, name: str) -> Threshold:
        return self._thresholds[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._thresholds)

    def __len__(self) -> int:
        return len(self._thresholds)

    def __repr__(self) -> str:
        return f"ThresholdTable({dict(self._thresholds)!r})"

    def with_overrides(
        self, overrides: Optional[Mapping[str, Mapping[str, float]]]
    ) -> "ThresholdTable":
        """Return a new table with selected warning/danger values replaced."""
        if not overrides:
            return self
        updated: Dict[str, Threshold] = dict(self._thresholds)
        for name, tiers in overrides.items():
            if name not in updated:
                raise KeyError(f"Unknown sensor field {name!r}.")
            unknown = set(tiers) - {"warning", "danger"}
            if unknown:
                raise KeyError(f"Unknown threshold tier(s) for {name!r}: {sorted(unknown)}")
            updated[name] = replace(updated[name], **{tier: float(v) for tier, v in tiers.items()})
        return ThresholdTable(updated)

    def inconsistent_fields(self) -> list[str]:
        return [name for name, threshold in self._thresholds.items() if not threshold.is_consistent]


# Temperature danger sits below its warning value; kept as published by the
# field devices. See inconsistent_fields().
DEFAULT_THRESHOLDS = ThresholdTable(
    {
        TEMPERATURE: Threshold(warning=28.0, danger=25.0),
        HUMIDITY: Threshold(warning=80.0, danger=90.0),
        DISTANCE_CM: Threshold(warning=5.0, danger=3.0, inverted=True),
        FLOW_RATE_LPM: Threshold(warning=5.0, danger=20.0),
    }
)
