"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from synthetic_api.common.errors import ConfigError

SOURCE_KINDS = ("paginated", "document", "csv")
QUERY_KEYS = ("properties", "values")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _validate_source(source: dict) -> None:
    _assert_required_keys(source, {"kind"}, "source")
    kind = source["kind"]
    if kind not in SOURCE_KINDS:
        raise ConfigError(f"Unsupported source kind: {kind}")
    if kind == "paginated":
        _assert_required_keys(source, {"url", "page_size"}, "source")
        if int(source["page_size"]) <= 0:
            raise ConfigError("source.page_size must be positive")
    elif kind == "document":
        _assert_required_keys(source, {"url", "records_key"}, "source")
    else:
        _assert_required_keys(source, {"filename"}, "source")


def _validate_groupings(groupings: list) -> None:
    if not isinstance(groupings, list):
        raise ConfigError("groupings must be a list")

    directories: list[str] = []
    for idx, grouping in enumerate(groupings):
        _assert_required_keys(grouping, {"property", "directory"}, f"groupings[{idx}]")
        directories.append(grouping["directory"])

    dupes = {name for name in directories if directories.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate grouping directories: {', '.join(sorted(dupes))}")


def validate_dataset_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {
        "dataset",
        "source",
        "normalize",
        "groupings",
        "metadata",
    }
    top_known = top_required | {"location", "geocoding", "http"}
    _assert_required_keys(cfg, top_required, "dataset config")
    _assert_no_unknown_keys(cfg, top_known, "dataset config", allow_unknown)

    _assert_required_keys(cfg["dataset"], {"name"}, "dataset")
    _validate_source(cfg["source"])
    _assert_required_keys(cfg["normalize"], {"id_field"}, "normalize")
    _validate_groupings(cfg["groupings"])
    _assert_required_keys(
        cfg["metadata"],
        {"source", "credit", "all_url", "query_url", "query_key"},
        "metadata",
    )
    if cfg["metadata"]["query_key"] not in QUERY_KEYS:
        raise ConfigError(f"metadata.query_key must be one of: {', '.join(QUERY_KEYS)}")

    geocoding = cfg.get("geocoding") or {}
    if geocoding.get("enabled"):
        _assert_required_keys(geocoding, {"endpoint", "max_records", "delay_seconds"}, "geocoding")
        _assert_required_keys(cfg.get("location") or {}, {"fields"}, "location")

    return cfg
