"""Source dispatch by configured kind."""

from __future__ import annotations

import logging
from pathlib import Path

from synthetic_api.common.errors import ConfigError
from synthetic_api.common.http import HttpClient
from synthetic_api.sources.csv_file import read_csv_records
from synthetic_api.sources.document import fetch_document
from synthetic_api.sources.paginated import fetch_paginated


def load_source_records(
    source_config: dict,
    *,
    client: HttpClient,
    source_dir: Path | None = None,
    logger: logging.Logger | None = None,
) -> list[dict]:
    kind = source_config["kind"]

    if kind == "paginated":
        return fetch_paginated(
            client,
            source_config["url"],
            page_size=int(source_config["page_size"]),
            params=source_config.get("params"),
            logger=logger,
        )
    if kind == "document":
        return fetch_document(client, source_config["url"], source_config["records_key"])
    if kind == "csv":
        if source_dir is None:
            raise ConfigError("--source is required for CSV datasets")
        return read_csv_records(source_dir / source_config["filename"])

    raise ConfigError(f"Unsupported source kind: {kind}")
