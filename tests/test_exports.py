from __future__ import annotations

import asyncio
import io
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import httpx
import pandas as pd
import pytest

from ragclient.application import SessionService
from ragclient.core.charts import aggregate, category_of
from ragclient.core.csvio import encode_records_to_csv
from ragclient.core.settings import ClientSettings
from ragclient.domain.agents import EXPORT
from ragclient.exporters.dataset_csv import export_records
from ragclient.infrastructure import GatewayError, LocalDownloadSaver, SavedFile, configure_file_saver


def _service(handler, tmp_path: Path) -> SessionService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    settings = ClientSettings(api_base="http://rag.test", timeout=5.0, downloads_root=tmp_path)
    return SessionService(settings, http_client=client, saver=LocalDownloadSaver(tmp_path / "downloads"))


def _unused(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
    raise AssertionError("no request expected")


def test_csv_quotes_and_round_trips():
    rows = [
        {"Name": "A, B", "Email": "a@x.com"},
        {"Name": 'C"D', "Email": "c@y.com"},
    ]

    text = encode_records_to_csv(rows)

    assert text == 'Name,Email\n"A, B",a@x.com\n"C""D",c@y.com\n'
    parsed = pd.read_csv(io.StringIO(text), dtype=str).to_dict(orient="records")
    assert parsed == rows


def test_csv_uses_first_record_columns():
    rows = [
        {"Name": "Ada", "Age": 36},
        {"Name": "Bob"},
        {"Name": "Cy", "Age": 41, "Extra": "dropped"},
    ]

    assert encode_records_to_csv(rows) == "Name,Age\nAda,36\nBob,\nCy,41\n"


def test_csv_empty_dataset():
    assert encode_records_to_csv([]) == ""


def test_chart_category_fallbacks():
    assert category_of({"Type": "Email", "Name": "Ada"}) == "Email"
    assert category_of({"Name": "Ada", "type": "Phone"}) == "Phone"
    assert category_of({"Name": "Ada", "Email": "ada@x.com"}) == "Ada"
    assert category_of({"Count": 3}) == "3"
    assert category_of({}) == "Item"


def test_chart_buckets_partition_dataset_in_first_seen_order():
    dataset = [
        {"Type": "Phone", "Value": "555"},
        {"Type": "Email", "Value": "a@x.com"},
        {"type": "Email", "Value": "b@x.com"},
        {"Name": "Bob"},
        {},
        {"Type": "Phone", "Value": "556"},
    ]

    buckets = aggregate(dataset)

    assert [(bucket.label, bucket.count) for bucket in buckets] == [
        ("Phone", 2),
        ("Email", 2),
        ("Bob", 1),
        ("Item", 1),
    ]
    assert sum(bucket.count for bucket in buckets) == len(dataset)
    assert all(bucket.count >= 1 for bucket in buckets)


def test_chart_buckets_empty_dataset():
    assert aggregate([]) == []


def test_export_records_writes_file(tmp_path):
    saver = LocalDownloadSaver(tmp_path)

    saved = export_records(saver, [{"Name": "A, B", "Email": "a@x.com"}])

    assert saved is not None
    assert saved.filename == "export.csv"
    assert (tmp_path / "export.csv").read_text(encoding="utf-8") == 'Name,Email\n"A, B",a@x.com\n'
    assert saved.size == len((tmp_path / "export.csv").read_bytes())


def test_export_records_skips_empty_dataset(tmp_path):
    assert export_records(LocalDownloadSaver(tmp_path), []) is None
    assert not (tmp_path / "export.csv").exists()


def test_export_current_dataset(tmp_path):
    service = _service(_unused, tmp_path)
    assert service.exporter.export_current() is None
    assert len(service.activity) == 0

    service.store.set_dataset([{"Name": "Ada", "Type": "Email"}])
    saved = service.exporter.export_current("contacts.csv")

    target = tmp_path / "downloads" / "contacts.csv"
    assert saved.location == str(target)
    assert target.read_text(encoding="utf-8") == "Name,Type\nAda,Email\n"
    assert service.activity.entries[-1].agent == EXPORT
    assert service.activity.entries[-1].action == "saved"


def test_server_exports_listing_and_fetch(tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/exports":
            return httpx.Response(200, json={"files": ["contacts_2024.csv", "report.json"]})
        if request.url.path == "/exports/contacts_2024.csv":
            return httpx.Response(200, content=b"Name\nAda\n")
        return httpx.Response(404)

    service = _service(handler, tmp_path)

    assert asyncio.run(service.exporter.list_server_exports()) == ["contacts_2024.csv", "report.json"]

    saved = asyncio.run(service.exporter.fetch_server_export("contacts_2024.csv"))

    assert (tmp_path / "downloads" / "contacts_2024.csv").read_bytes() == b"Name\nAda\n"
    assert saved.size == 9
    assert service.activity.entries[-1].action == "downloaded"

    with pytest.raises(GatewayError):
        asyncio.run(service.exporter.fetch_server_export("missing.csv"))


def test_server_exports_listing_failure(tmp_path):
    service = _service(lambda request: httpx.Response(500), tmp_path)

    with pytest.raises(GatewayError) as info:
        asyncio.run(service.exporter.list_server_exports())

    assert info.value.message == "Backend unreachable"


class _MemorySaver:
    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}

    def save(self, filename: str, content: bytes, media_type: str) -> SavedFile:
        self.files[filename] = (content, media_type)
        return SavedFile(filename=filename, size=len(content))


def test_configured_file_saver_receives_exports(tmp_path):
    memory = _MemorySaver()
    configure_file_saver(memory)
    try:
        settings = ClientSettings(api_base="http://rag.test", downloads_root=tmp_path)
        service = SessionService(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(_unused)))
        service.store.set_dataset([{"Type": "Email"}])

        saved = service.exporter.export_current()
    finally:
        configure_file_saver(None)

    assert saved.location is None
    assert memory.files == {"export.csv": (b"Type\nEmail\n", "text/csv")}
    assert not list(tmp_path.iterdir())
