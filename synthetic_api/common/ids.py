"""Run identifier helpers."""

from __future__ import annotations

from datetime import datetime


def generate_run_id(now: datetime) -> str:
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")
