"""Single-pass dataset build: load, normalise, reconcile, write."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from synthetic_api.common.fs import ensure_dir
from synthetic_api.common.http import HttpClient, build_http_client
from synthetic_api.common.logging import log_event
from synthetic_api.common.models import RunContext
from synthetic_api.pipeline.existing import load_existing_dataset
from synthetic_api.pipeline.geocode import HereGeocoder
from synthetic_api.pipeline.normalize import normalize_records
from synthetic_api.pipeline.reconcile import apply_known_geometries, geocode_unresolved
from synthetic_api.pipeline.writer import write_dataset, write_nomatch
from synthetic_api.sources.runner import load_source_records


@dataclass(frozen=True)
class RunOptions:
    destination: Path
    source_dir: Path | None = None
    existing_dir: Path | None = None
    api_key: str | None = None
    geocode_limit: int | None = None


def run_dataset(
    dataset_config: dict,
    options: RunOptions,
    ctx: RunContext,
    logger: logging.Logger,
    *,
    http_client: HttpClient | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    name = dataset_config["dataset"]["name"]
    location_fields = list((dataset_config.get("location") or {}).get("fields") or [])
    geocoding_cfg = dataset_config.get("geocoding") or {}

    ensure_dir(options.destination)

    owns_client = http_client is None
    client = http_client or build_http_client(dataset_config.get("http") or {})
    try:
        existing = load_existing_dataset(
            options.existing_dir,
            location_fields,
            (dataset_config.get("location") or {}).get("override_filename"),
        )
        log_event(
            logger,
            "existing dataset loaded",
            dataset=name,
            stage="existing",
            event="EXISTING_LOADED",
            status="ok",
            rows_in=len(existing.locations),
            rows_out=len(existing.overrides),
        )

        records = load_source_records(
            dataset_config["source"],
            client=client,
            source_dir=options.source_dir,
            logger=logger,
        )
        features = normalize_records(records, dataset_config["normalize"])
        log_event(
            logger,
            "records normalised",
            dataset=name,
            stage="normalize",
            event="NORMALIZED",
            status="ok",
            rows_in=len(records),
            rows_out=len(features),
        )

        if location_fields:
            features = apply_known_geometries(features, existing, location_fields)

        result = None
        if geocoding_cfg.get("enabled") and options.api_key:
            geocoder = HereGeocoder(
                client,
                options.api_key,
                endpoint=geocoding_cfg["endpoint"],
                country=geocoding_cfg.get("country"),
            )
            max_records = options.geocode_limit
            if max_records is None:
                max_records = int(geocoding_cfg["max_records"])
            result = geocode_unresolved(
                features,
                geocoder,
                location_fields=location_fields,
                max_records=max_records,
                delay_seconds=float(geocoding_cfg["delay_seconds"]),
                logger=logger,
                sleep=sleep,
            )
            features = result.features
            log_event(
                logger,
                f"geocode complete, geocoded {result.calls} features",
                dataset=name,
                stage="geocode",
                event="GEOCODE_END",
                status="partial" if result.rate_limit_error else "ok",
                rows_in=result.calls,
                rows_out=result.resolved,
            )
    finally:
        if owns_client:
            client.close()

    metadata = write_dataset(
        options.destination,
        features,
        dataset_config["groupings"],
        dataset_config["metadata"],
        ctx,
    )
    if result is not None:
        write_nomatch(options.destination, result.nomatch)

    unresolved = sum(1 for feature in features if not feature.resolved)
    log_event(
        logger,
        f"wrote {len(features)} features",
        dataset=name,
        stage="write",
        event="WRITTEN",
        status="ok",
        rows_out=len(features),
    )

    return {
        "dataset": name,
        "run_id": ctx.run_id,
        "total": metadata["total"],
        "unresolved": unresolved,
        "geocode_calls": result.calls if result is not None else 0,
        "rate_limited": bool(result is not None and result.rate_limit_error is not None),
    }
