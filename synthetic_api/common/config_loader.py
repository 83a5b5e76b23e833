"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from synthetic_api.common.constants import DATASETS
from synthetic_api.common.errors import ConfigError
from synthetic_api.common.fs import read_yaml
from synthetic_api.common.schema import validate_dataset_config


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing dataset config: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    return _deep_merge(base, overlay)


def load_dataset_config(
    dataset: str,
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> dict:
    if dataset not in DATASETS:
        raise ConfigError(f"Unknown dataset: {dataset}")

    filename = f"{dataset}.yml"
    overlay_path = overlay_config_dir / filename if overlay_config_dir is not None else None
    cfg = _load_yaml_with_overlay(config_dir / filename, overlay_path)
    return validate_dataset_config(cfg, allow_unknown=allow_unknown)

