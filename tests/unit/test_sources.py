from __future__ import annotations

from pathlib import Path

import pytest

from synthetic_api.common.errors import ConfigError, StageError
from synthetic_api.common.http import HttpRequestError
from synthetic_api.sources.csv_file import read_csv_records
from synthetic_api.sources.document import fetch_document
from synthetic_api.sources.runner import load_source_records


class DocumentClient:
    def __init__(self, payload):
        self.payload = payload

    def get_json(self, url: str, **kwargs):
        return self.payload


def test_fetch_document_returns_record_list():
    client = DocumentClient({"ports": [{"globalId": "{A}"}]})
    assert fetch_document(client, "https://example.test", "ports") == [{"globalId": "{A}"}]


def test_fetch_document_without_records_key_raises():
    with pytest.raises(HttpRequestError):
        fetch_document(DocumentClient({"other": []}), "https://example.test", "ports")


def test_read_csv_records_skips_empty_lines(tmp_path: Path):
    path = tmp_path / "airports.csv"
    path.write_text('id,name,type\n1,"Alpha, Field",small_airport\n,,\n2,Bravo,heliport\n', encoding="utf-8")

    rows = read_csv_records(path)

    assert rows == [
        {"id": "1", "name": "Alpha, Field", "type": "small_airport"},
        {"id": "2", "name": "Bravo", "type": "heliport"},
    ]


def test_read_csv_records_missing_file_is_fatal(tmp_path: Path):
    with pytest.raises(StageError):
        read_csv_records(tmp_path / "airports.csv")


def test_load_source_records_csv_requires_source_dir():
    with pytest.raises(ConfigError):
        load_source_records({"kind": "csv", "filename": "airports.csv"}, client=DocumentClient(None))


def test_load_source_records_dispatches_document():
    records = load_source_records(
        {"kind": "document", "url": "https://example.test", "records_key": "ports"},
        client=DocumentClient({"ports": [{"portName": "Aberdeen"}]}),
    )
    assert records == [{"portName": "Aberdeen"}]
