"""Reconcile fresh features against known geometries, then geocode the rest.

Known geometry comes from two places: the override map (keyed by feature id)
and the location index built from the previous run's output. Only features
that neither source resolves are sent to the live geocoder, and only up to a
per-run budget. Unresolved features are carried forward unchanged and get
another chance on the next run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from synthetic_api.common.http import RateLimitedHttpError
from synthetic_api.common.logging import log_event
from synthetic_api.common.models import Feature
from synthetic_api.pipeline.existing import ExistingDataset, location_key


class Geocoder(Protocol):
    def geocode(self, query: str) -> dict[str, Any] | None: ...


@dataclass(frozen=True)
class NoMatch:
    id: str
    query: str
    properties: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "query": self.query, "properties": dict(self.properties)}


@dataclass
class ReconcileResult:
    features: list[Feature]
    calls: int = 0
    resolved: int = 0
    nomatch: list[NoMatch] = field(default_factory=list)
    rate_limit_error: RateLimitedHttpError | None = None

    @property
    def unresolved(self) -> int:
        return sum(1 for feature in self.features if not feature.resolved)


def apply_known_geometries(
    features: list[Feature],
    existing: ExistingDataset,
    location_fields: list[str],
) -> list[Feature]:
    out: list[Feature] = []
    for feature in features:
        if feature.resolved:
            out.append(feature)
            continue

        geometry = existing.overrides.get(feature.id)
        if geometry is None:
            geometry = existing.locations.get(location_key(feature.properties, location_fields))

        out.append(feature.with_geometry(geometry) if geometry is not None else feature)
    return out


def geocode_unresolved(
    features: list[Feature],
    geocoder: Geocoder,
    *,
    location_fields: list[str],
    max_records: int,
    delay_seconds: float = 0.5,
    logger: logging.Logger | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ReconcileResult:
    result = ReconcileResult(features=list(features))
    if max_records <= 0:
        return result

    for idx, feature in enumerate(result.features):
        if feature.resolved:
            continue
        if result.calls >= max_records:
            break

        if result.calls:
            sleep(delay_seconds)

        query = location_key(feature.properties, location_fields)
        result.calls += 1

        try:
            geometry = geocoder.geocode(query)
        except RateLimitedHttpError as exc:
            result.rate_limit_error = exc
            if logger is not None:
                logger.warning(
                    f"geocoding rate limited, stopping: {exc}",
                    extra={
                        "stage": "geocode",
                        "event": "GEOCODE_RATE_LIMITED",
                        "status": "error",
                        "feature_id": feature.id,
                        "attempt": result.calls,
                        "error_code": exc.error_code,
                    },
                )
            break

        if geometry is None:
            result.nomatch.append(NoMatch(id=feature.id, query=query, properties=dict(feature.properties)))
            if logger is not None:
                log_event(
                    logger,
                    f"no geocode candidates for {query!r}",
                    stage="geocode",
                    event="GEOCODE_NO_MATCH",
                    status="skipped",
                    feature_id=feature.id,
                    attempt=result.calls,
                )
            continue

        result.features[idx] = feature.with_geometry(geometry)
        result.resolved += 1
        if logger is not None:
            log_event(
                logger,
                f"geocoded {query!r}",
                stage="geocode",
                event="GEOCODE_MATCH",
                status="ok",
                feature_id=feature.id,
                attempt=result.calls,
            )

    return result
