from __future__ import annotations

import json
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import httpx
import pytest
from fastapi.testclient import TestClient

from ragclient.application import SessionService, configure_session_service, reset_session_service
from ragclient.core.settings import ClientSettings
from ragclient.infrastructure import LocalDownloadSaver

CONTACTS = [
    {"Name": "Ada", "Email": "ada@x.com", "Type": "Email"},
    {"Name": "Bob, Jr.", "Email": "bob@y.com", "Type": "Email"},
]


def _backend(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/health":
        return httpx.Response(200, json={"status": "ok", "vector_db": "chroma", "llm_model": "gpt-4", "tools": ["web_scraper"]})
    if path == "/ingest":
        urls = json.loads(request.content)["urls"]
        return httpx.Response(200, json={"status": "ok", "detail": f"Indexed 4 chunks from {len(urls)} URL(s)."})
    if path == "/chat":
        return httpx.Response(500, json={"detail": "agent crashed"})
    if path == "/extract":
        return httpx.Response(200, json={"result": "Extracted 2 contacts.", "export_data": CONTACTS})
    if path == "/summarize":
        return httpx.Response(200, json={"summary": "Short summary."})
    if path == "/sources":
        return httpx.Response(200, json=["https://a.test"])
    if path == "/exports":
        return httpx.Response(200, json={"files": ["contacts.csv"]})
    if path == "/exports/contacts.csv":
        return httpx.Response(200, content=b"Name\nAda\n")
    return httpx.Response(404, json={"detail": "not found"})


@pytest.fixture(autouse=True)
def reset_state():
    reset_session_service()
    yield
    reset_session_service()


@pytest.fixture()
def service(tmp_path):
    client = httpx.AsyncClient(transport=httpx.MockTransport(_backend))
    settings = ClientSettings(api_base="http://rag.test", timeout=5.0, downloads_root=tmp_path)
    session = SessionService(settings, http_client=client, saver=LocalDownloadSaver(tmp_path))
    configure_session_service(session)
    return session


@pytest.fixture()
def client(service):
    from ragclient.app import create_app

    app = create_app(service.settings)
    with TestClient(app) as test_client:
        yield test_client


def test_startup_probes_backend(client):
    data = client.get("/api/session").json()

    assert data["availability"] == "online"
    assert data["backend_info"] == {"vector_db": "chroma", "llm_model": "gpt-4", "tool_count": 1}
    assert data["status"] == "idle"
    assert data["api_base"] == "http://rag.test"


def test_ingest_then_extract_then_download(client, tmp_path):
    response = client.post("/api/session/ingest", json={"text": "https://a.test\nhttps://b.test"})
    assert response.status_code == 200
    data = response.json()
    assert data["sources"] == ["https://a.test", "https://b.test"]
    assert data["transcript"][-1]["content"] == "✅ Indexed 4 chunks from 2 URL(s)."

    assert client.get("/api/session/export.csv").status_code == 404

    response = client.post("/api/session/extract", json={"extract_type": "contacts", "query": "all"})
    assert response.status_code == 200
    data = response.json()
    assert data["dataset"] == CONTACTS
    assert data["buckets"] == [{"label": "Email", "count": 2}]
    assert data["transcript"][-1]["agent"]["id"] == "extractor"
    assert data["activity"][0]["action"] == "done"

    response = client.get("/api/session/export.csv", params={"filename": "contacts.csv"})
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="contacts.csv"'
    assert response.text == 'Name,Email,Type\nAda,ada@x.com,Email\n"Bob, Jr.",bob@y.com,Email\n'


def test_chat_failure_is_reported_in_transcript(client):
    response = client.post("/api/session/chat", json={"message": "hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "idle"
    assert data["transcript"][-2]["role"] == "user"
    assert data["transcript"][-1]["is_error"] is True
    assert "agent crashed" in data["transcript"][-1]["content"]


def test_busy_session_rejects_workflows(client, service):
    service.store.begin("Thinking...")
    try:
        response = client.post("/api/session/chat", json={"message": "hello"})
        assert response.status_code == 409
        response = client.post("/api/session/ingest", json={"text": "https://a.test"})
        assert response.status_code == 409
        assert client.post("/api/session/health").status_code == 200
    finally:
        service.store.finish()

    assert client.get("/api/session").json()["status"] == "idle"


def test_summarize_and_validation(client):
    assert client.post("/api/session/summarize", json={}).status_code == 400
    assert client.post("/api/session/extract", json={"query": "all"}).status_code == 400

    data = client.post("/api/session/summarize", json={"url": "https://a.test"}).json()
    assert data["transcript"][-1]["content"] == "Short summary."
    assert data["transcript"][-1]["agent"]["id"] == "summarizer"


def test_remote_listings_and_server_download(client, tmp_path):
    assert client.get("/api/session/sources/remote").json() == {"items": ["https://a.test"]}
    assert client.get("/api/session/exports").json() == {"files": ["contacts.csv"]}

    response = client.post("/api/session/exports/contacts.csv/download")
    assert response.status_code == 200
    assert response.json()["filename"] == "contacts.csv"
    assert (tmp_path / "contacts.csv").read_bytes() == b"Name\nAda\n"

    assert client.post("/api/session/exports/missing.csv/download").status_code == 502
