from __future__ import annotations

import pytest

from synthetic_api.common.http import HttpRequestError, RateLimitedHttpError
from synthetic_api.pipeline.geocode import HereGeocoder, resolve_api_key


class FakeHttpClient:
    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def get_json(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.payload


def test_geocode_uses_first_candidate_in_lon_lat_order():
    client = FakeHttpClient(
        {
            "items": [
                {"position": {"lat": 31.2154361, "lng": -85.3614579}},
                {"position": {"lat": 0, "lng": 0}},
            ]
        }
    )
    geocoder = HereGeocoder(client, "key", endpoint="https://geo.test/v1/geocode", country="USA")

    geometry = geocoder.geocode("1108 Ross Clark Circle, Dothan, AL, 36301")

    assert geometry == {"type": "Point", "coordinates": [-85.361458, 31.215436]}
    url, kwargs = client.calls[0]
    assert url == "https://geo.test/v1/geocode"
    assert kwargs["params"] == {
        "q": "1108 Ross Clark Circle, Dothan, AL, 36301",
        "apiKey": "key",
        "in": "countryCode:USA",
    }


def test_geocode_without_candidates_returns_none():
    geocoder = HereGeocoder(FakeHttpClient({"items": []}), "key", endpoint="https://geo.test")
    assert geocoder.geocode("nowhere") is None

    geocoder = HereGeocoder(FakeHttpClient({}), "key", endpoint="https://geo.test")
    assert geocoder.geocode("nowhere") is None


def test_geocode_propagates_rate_limit():
    geocoder = HereGeocoder(FakeHttpClient(error=RateLimitedHttpError("Too Many Requests")), "key", endpoint="x")
    with pytest.raises(RateLimitedHttpError):
        geocoder.geocode("q")


def test_geocode_rejects_non_object_payload():
    geocoder = HereGeocoder(FakeHttpClient(["unexpected"]), "key", endpoint="x")
    with pytest.raises(HttpRequestError):
        geocoder.geocode("q")


def test_resolve_api_key_prefers_cli_string(monkeypatch):
    monkeypatch.setenv("HERE_TEST_KEY", "env")
    cfg = {"api_key_env": "HERE_TEST_KEY"}

    assert resolve_api_key("cli", cfg) == "cli"
    assert resolve_api_key(True, cfg) == "env"
    assert resolve_api_key(None, {}) is None
