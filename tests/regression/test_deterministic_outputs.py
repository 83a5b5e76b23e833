import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from synthetic_api.cli import main
from synthetic_api.common.config_loader import load_dataset_config
from synthetic_api.common.models import RunContext
from synthetic_api.pipeline.run import RunOptions, run_dataset

AIRPORTS_CSV = """id,ident,type,name,latitude_deg,longitude_deg,iso_country
2434,EGLL,large_airport,London Heathrow Airport,51.4706,-0.461941,GB
3682,KJFK,large_airport,John F Kennedy International Airport,40.639447,-73.779317,US
6523,00A,heliport,Total Rf Heliport,40.070985,-74.933689,US
"""

CMS_URL = "https://data.cms.gov/provider-data/api/1/datastore/query/xubh-q36u/0"
HERE_URL = "https://geocode.search.hereapi.com/v1/geocode"


class RegressionHttpClient:
    def __init__(self, records):
        self.records = records
        self.geocode_calls = 0

    def get_json(self, url: str, **kwargs):
        params = kwargs.get("params") or {}
        if url == CMS_URL:
            offset = params["offset"]
            return {"results": self.records[offset : offset + params["limit"]], "count": len(self.records)}
        self.geocode_calls += 1
        return {"items": [{"position": {"lat": 40.0 + self.geocode_calls, "lng": -75.0}}]}

    def close(self):
        return None


@pytest.mark.regression
def test_airports_outputs_are_byte_stable_for_same_inputs(tmp_path: Path):
    source = tmp_path / "source"
    source.mkdir()
    (source / "airports.csv").write_text(AIRPORTS_CSV, encoding="utf-8")

    first = tmp_path / "first"
    second = tmp_path / "second"
    assert main(["airports", "--source", str(source), "--destination", str(first), "--run-id", "run-a"]) == 0
    assert main(["airports", "--source", str(source), "--destination", str(second), "--run-id", "run-b"]) == 0

    for relative in ("all.geojson", "type/large_airport.geojson", "iso_country/us.geojson"):
        assert (first / relative).read_bytes() == (second / relative).read_bytes()


@pytest.mark.regression
def test_hospitals_rerun_against_own_output_is_idempotent(tmp_path: Path):
    records = [
        {"facility_id": "A", "facility_name": "Alpha", "address": "1 Main St", "citytown": "X", "state": "PA", "zip_code": "1"},
        {"facility_id": "B", "facility_name": "Bravo", "address": "2 Main St", "citytown": "X", "state": "PA", "zip_code": "1"},
    ]
    cfg = load_dataset_config("hospitals", Path("config"))
    ctx = RunContext(run_id="run-r", now=datetime(2024, 5, 1, tzinfo=timezone.utc))
    logger = logging.getLogger("test.regression")
    out = tmp_path / "hospitals"

    first_client = RegressionHttpClient(records)
    run_dataset(cfg, RunOptions(destination=out, api_key="key"), ctx, logger, http_client=first_client, sleep=lambda _s: None)
    first_bytes = (out / "all.geojson").read_bytes()

    second_client = RegressionHttpClient(records)
    run_dataset(
        cfg,
        RunOptions(destination=out, existing_dir=out, api_key="key"),
        ctx,
        logger,
        http_client=second_client,
        sleep=lambda _s: None,
    )

    assert first_client.geocode_calls == 2
    assert second_client.geocode_calls == 0
    assert (out / "all.geojson").read_bytes() == first_bytes
