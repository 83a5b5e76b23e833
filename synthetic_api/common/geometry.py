"""Geometry helpers."""

from __future__ import annotations

from typing import Any

from synthetic_api.common.constants import COORDINATE_PRECISION


def round_coordinate(value: float) -> float:
    return round(float(value), COORDINATE_PRECISION)


def make_point(lon: float, lat: float) -> dict[str, Any]:
    return {
        "type": "Point",
        "coordinates": [round_coordinate(lon), round_coordinate(lat)],
    }


def is_point(geometry: Any) -> bool:
    if not isinstance(geometry, dict) or geometry.get("type") != "Point":
        return False
    coordinates = geometry.get("coordinates")
    return isinstance(coordinates, list) and len(coordinates) == 2
