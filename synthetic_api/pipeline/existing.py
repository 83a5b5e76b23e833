"""Load a previous run's output as a reconciliation seed."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from synthetic_api.common.constants import ALL_FILENAME
from synthetic_api.common.errors import StageError
from synthetic_api.common.fs import read_json
from synthetic_api.common.geometry import is_point
from synthetic_api.common.models import Feature


@dataclass(frozen=True)
class ExistingDataset:
    locations: dict[str, dict[str, Any]] = field(default_factory=dict)
    overrides: dict[str, dict[str, Any]] = field(default_factory=dict)


def location_key(properties: dict[str, Any], location_fields: list[str]) -> str:
    return ", ".join(str(properties.get(name, "")) for name in location_fields)


def _read_optional_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    try:
        return read_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StageError(f"Unable to parse {path}") from exc


def _index_locations(payload: Any, location_fields: list[str], path: Path) -> dict[str, dict[str, Any]]:
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise StageError(f"{path} is not a FeatureCollection")

    locations: dict[str, dict[str, Any]] = {}
    for idx, item in enumerate(payload["features"]):
        if not isinstance(item, dict):
            raise StageError(f"{path} has a malformed feature at index {idx}")
        feature = Feature.from_dict(item)
        if not feature.resolved:
            continue
        if not is_point(feature.geometry):
            raise StageError(f"{path} has an invalid geometry for feature {feature.id}")
        locations[location_key(feature.properties, location_fields)] = feature.geometry
    return locations


def _overrides(payload: Any, path: Path) -> dict[str, dict[str, Any]]:
    if not isinstance(payload, dict):
        raise StageError(f"{path} must map feature ids to geometries")
    invalid = sorted(str(key) for key, geometry in payload.items() if not is_point(geometry))
    if invalid:
        raise StageError(f"{path} has invalid geometries for: {', '.join(invalid)}")
    return {str(key): geometry for key, geometry in payload.items()}


def load_existing_dataset(
    directory: Path | None,
    location_fields: list[str],
    override_filename: str | None = None,
) -> ExistingDataset:
    """Index a prior output directory by location key.

    Missing files mean a first run and yield empty mappings; files that exist
    but cannot be parsed raise ``StageError``.
    """
    if directory is None:
        return ExistingDataset()

    all_path = directory / ALL_FILENAME
    all_payload = _read_optional_json(all_path)
    locations = _index_locations(all_payload, location_fields, all_path) if all_payload is not None else {}

    overrides: dict[str, dict[str, Any]] = {}
    if override_filename:
        override_path = directory / override_filename
        override_payload = _read_optional_json(override_path)
        if override_payload is not None:
            overrides = _overrides(override_payload, override_path)

    return ExistingDataset(locations=locations, overrides=overrides)
