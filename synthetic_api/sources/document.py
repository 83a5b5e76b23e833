"""Single JSON document fetch."""

from __future__ import annotations

from synthetic_api.common.http import HttpClient, HttpRequestError


def fetch_document(client: HttpClient, url: str, records_key: str) -> list[dict]:
    payload = client.get_json(url)
    if not isinstance(payload, dict) or not isinstance(payload.get(records_key), list):
        raise HttpRequestError(f"Document from {url} has no '{records_key}' list")
    return list(payload[records_key])
