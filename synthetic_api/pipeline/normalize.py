"""Convert raw source records into canonical features."""

from __future__ import annotations

from typing import Any

from synthetic_api.common.geometry import make_point
from synthetic_api.common.models import Feature


def _safe_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _feature_id(record: dict, normalize_config: dict) -> str:
    value = str(record.get(normalize_config["id_field"], ""))
    if normalize_config.get("strip_id_braces") and value.startswith("{") and value.endswith("}"):
        return value[1:-1]
    return value


def _geometry(record: dict, normalize_config: dict) -> dict[str, Any] | None:
    lat_field = normalize_config.get("lat_field")
    lon_field = normalize_config.get("lon_field")
    if not lat_field or not lon_field:
        return None
    lat = _safe_float(record.get(lat_field))
    lon = _safe_float(record.get(lon_field))
    if lat is None or lon is None:
        return None
    return make_point(lon, lat)


def normalize_record(record: dict, normalize_config: dict) -> Feature:
    dropped: set[str] = set()
    if normalize_config.get("drop_id_field"):
        dropped.add(normalize_config["id_field"])
    if normalize_config.get("drop_coordinate_fields"):
        dropped.update(
            field for field in (normalize_config.get("lat_field"), normalize_config.get("lon_field")) if field
        )

    properties = {
        key: value
        for key, value in record.items()
        if key not in dropped and value is not None and value != ""
    }

    return Feature(
        id=_feature_id(record, normalize_config),
        properties=properties,
        geometry=_geometry(record, normalize_config),
    )


def _excluded(record: dict, exclude: dict[str, list]) -> bool:
    return any(record.get(field) in values for field, values in exclude.items())


def _sort_value(feature: Feature, sort_property: str) -> str:
    value = feature.properties.get(sort_property)
    return value.lower() if isinstance(value, str) else ""


def normalize_records(records: list[dict], normalize_config: dict) -> list[Feature]:
    exclude = normalize_config.get("exclude") or {}
    features = [
        normalize_record(record, normalize_config)
        for record in records
        if not _excluded(record, exclude)
    ]

    sort_property = normalize_config.get("sort_property")
    if sort_property:
        features = sorted(features, key=lambda feature: _sort_value(feature, sort_property))
    return features
