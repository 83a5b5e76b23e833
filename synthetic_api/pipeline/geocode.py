"""HERE geocoding client."""

from __future__ import annotations

import os
from typing import Any

from synthetic_api.common.geometry import make_point
from synthetic_api.common.http import HttpClient, HttpRequestError


class HereGeocoder:
    """Free-text geocoder returning the ranked ``items`` of the HERE v1 API.

    HTTP 429 surfaces as ``RateLimitedHttpError`` from the client.
    """

    def __init__(self, client: HttpClient, api_key: str, *, endpoint: str, country: str | None = None) -> None:
        self.client = client
        self.api_key = api_key
        self.endpoint = endpoint
        self.country = country

    def candidates(self, query: str) -> list[dict[str, Any]]:
        params = {"q": query, "apiKey": self.api_key}
        if self.country:
            params["in"] = f"countryCode:{self.country}"

        payload = self.client.get_json(self.endpoint, params=params)
        if not isinstance(payload, dict):
            raise HttpRequestError(f"Unexpected geocode payload for {query!r}")
        items = payload.get("items")
        return items if isinstance(items, list) else []

    def geocode(self, query: str) -> dict[str, Any] | None:
        items = self.candidates(query)
        if not items:
            return None
        position = items[0].get("position") or {}
        if position.get("lat") is None or position.get("lng") is None:
            return None
        return make_point(position["lng"], position["lat"])


def resolve_api_key(cli_value: object, geocoding_config: dict) -> str | None:
    if isinstance(cli_value, str) and cli_value:
        return cli_value
    env_name = geocoding_config.get("api_key_env")
    if env_name:
        return os.environ.get(env_name) or None
    return None
