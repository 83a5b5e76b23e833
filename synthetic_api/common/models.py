"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from synthetic_api.common.time_utils import epoch_millis


@dataclass(frozen=True)
class Feature:
    id: str
    properties: dict[str, Any] = field(default_factory=dict)
    geometry: dict[str, Any] | None = None

    @property
    def resolved(self) -> bool:
        return self.geometry is not None

    def with_geometry(self, geometry: dict[str, Any]) -> "Feature":
        return replace(self, geometry=geometry)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "Feature",
            "properties": dict(self.properties),
            "geometry": self.geometry,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Feature":
        return cls(
            id=str(payload.get("id")),
            properties=dict(payload.get("properties") or {}),
            geometry=payload.get("geometry"),
        )


@dataclass(frozen=True)
class RunContext:
    """Values fixed for the duration of a single run."""

    run_id: str
    now: datetime

    @property
    def updated_millis(self) -> int:
        return epoch_millis(self.now)
