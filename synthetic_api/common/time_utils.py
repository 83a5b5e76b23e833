"""UTC-focused helpers for run metadata."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")
