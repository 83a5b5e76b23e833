"""GeoJSON export grouped by categorical properties."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from synthetic_api.common.constants import ALL_FILENAME, METADATA_FILENAME, NOMATCH_FILENAME
from synthetic_api.common.errors import StageError
from synthetic_api.common.fs import write_geojson, write_json
from synthetic_api.common.models import Feature, RunContext
from synthetic_api.pipeline.reconcile import NoMatch


def feature_collection(features: Iterable[Feature]) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [feature.to_dict() for feature in features],
    }


def _file_stem(value: str) -> str:
    stem = value.lower()
    if stem in ("", ".", "..") or "/" in stem or "\\" in stem:
        raise StageError(f"Grouping value {value!r} cannot be used as a file name")
    return stem


def group_features(features: list[Feature], prop: str) -> dict[str, list[Feature]]:
    """Group by string value of ``prop``; values differing only by case share
    one group, listed under the first spelling seen."""
    grouped: dict[str, list[Feature]] = {}
    spelling: dict[str, str] = {}
    for feature in features:
        value = feature.properties.get(prop)
        if not isinstance(value, str):
            continue
        key = spelling.setdefault(value.lower(), value)
        grouped.setdefault(key, []).append(feature)
    return grouped


def build_metadata(
    metadata_config: dict,
    ctx: RunContext,
    total: int,
    values_by_directory: dict[str, list[str]],
) -> dict:
    return {
        "source": metadata_config["source"],
        "credit": metadata_config["credit"],
        "updated": ctx.updated_millis,
        "total": total,
        "endpoints": {
            "all": {"url": metadata_config["all_url"]},
            "query": {
                "url": metadata_config["query_url"],
                metadata_config["query_key"]: values_by_directory,
            },
        },
    }


def write_dataset(
    destination: Path,
    features: list[Feature],
    groupings: list[dict],
    metadata_config: dict,
    ctx: RunContext,
) -> dict:
    grouped_by_directory = {
        grouping["directory"]: group_features(features, grouping["property"]) for grouping in groupings
    }
    stems = {
        (directory, value): _file_stem(value)
        for directory, grouped in grouped_by_directory.items()
        for value in grouped
    }

    write_geojson(destination / ALL_FILENAME, feature_collection(features))

    values_by_directory: dict[str, list[str]] = {}
    for directory, grouped in grouped_by_directory.items():
        for value, members in grouped.items():
            write_geojson(destination / directory / f"{stems[directory, value]}.geojson", feature_collection(members))
        values_by_directory[directory] = list(grouped)

    metadata = build_metadata(metadata_config, ctx, len(features), values_by_directory)
    write_json(destination / METADATA_FILENAME, metadata)
    return metadata


def write_nomatch(destination: Path, nomatch: list[NoMatch]) -> Path:
    path = destination / NOMATCH_FILENAME
    write_json(path, [entry.to_dict() for entry in nomatch])
    return path
