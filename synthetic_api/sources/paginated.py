"""Offset-paginated JSON collection fetch."""

from __future__ import annotations

import logging
from typing import Any

from synthetic_api.common.errors import StageError
from synthetic_api.common.http import HttpClient, HttpRequestError
from synthetic_api.common.logging import log_event


def _page(payload: Any, url: str) -> tuple[list[dict], int]:
    if not isinstance(payload, dict):
        raise HttpRequestError(f"Unexpected page payload from {url}")
    results = payload.get("results") or []
    try:
        count = int(payload["count"])
    except (KeyError, TypeError, ValueError) as exc:
        raise HttpRequestError(f"Page from {url} did not report a record count") from exc
    return list(results), count


def fetch_paginated(
    client: HttpClient,
    url: str,
    *,
    page_size: int,
    params: dict[str, Any] | None = None,
    logger: logging.Logger | None = None,
) -> list[dict]:
    """Collect every record of a ``{results, count}`` collection.

    Pages are requested sequentially. The offset advances by the number of
    records actually returned, so short pages before the reported total are
    followed by another request rather than treated as the end.
    """
    records: list[dict] = []
    offset = 0
    total = -1

    while total < 0 or len(records) < total:
        page_params = dict(params or {})
        page_params.update({"limit": page_size, "offset": offset})
        payload = client.get_json(url, params=page_params)
        results, total = _page(payload, url)

        if logger is not None:
            log_event(
                logger,
                f"downloaded page at offset {offset}",
                stage="fetch",
                event="PAGE_FETCHED",
                status="ok",
                rows_in=len(results),
                rows_out=total,
            )

        if not results and len(records) < total:
            raise StageError(f"Empty page at offset {offset} before reaching reported total {total}")

        records.extend(results)
        offset += len(results)

    return records
