"""Local CSV source."""

from __future__ import annotations

import csv
from pathlib import Path

from synthetic_api.common.errors import StageError
from synthetic_api.common.fs import read_csv


def read_csv_records(path: Path) -> list[dict]:
    if not path.exists():
        raise StageError(f"{path} does not exist!")
    try:
        return read_csv(path)
    except (csv.Error, UnicodeDecodeError) as exc:
        raise StageError(f"Unable to parse CSV input {path}") from exc
