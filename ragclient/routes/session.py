from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from ragclient.application import SessionBusyError, get_session_service
from ragclient.exporters.dataset_csv import DEFAULT_FILENAME
from ragclient.infrastructure import GatewayError

router = APIRouter(prefix="/session", tags=["session"])


def _busy(exc: SessionBusyError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


@router.get("")
async def get_session() -> dict:
    return get_session_service().snapshot()


@router.post("/health")
async def refresh_health() -> dict:
    service = get_session_service()
    availability = await service.health.refresh()
    return {"availability": availability.value, "snapshot": service.snapshot()}


@router.post("/ingest")
async def ingest_urls(payload: dict) -> dict:
    service = get_session_service()
    try:
        await service.ingestion.ingest(str(payload.get("text") or ""))
    except SessionBusyError as exc:
        raise _busy(exc) from exc
    return service.snapshot()


@router.post("/chat")
async def send_message(payload: dict) -> dict:
    service = get_session_service()
    try:
        await service.chat.send(str(payload.get("message") or ""))
    except SessionBusyError as exc:
        raise _busy(exc) from exc
    return service.snapshot()


@router.post("/extract")
async def extract_data(payload: dict) -> dict:
    extract_type = str(payload.get("extract_type") or "").strip()
    if not extract_type:
        raise HTTPException(status_code=400, detail="extract_type is required")
    service = get_session_service()
    try:
        await service.extraction.extract(extract_type, str(payload.get("query") or ""))
    except SessionBusyError as exc:
        raise _busy(exc) from exc
    return service.snapshot()


@router.post("/summarize")
async def summarize_url(payload: dict) -> dict:
    url = str(payload.get("url") or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="url is required")
    service = get_session_service()
    try:
        await service.summaries.summarize(url)
    except SessionBusyError as exc:
        raise _busy(exc) from exc
    return service.snapshot()


@router.get("/sources/remote")
async def list_remote_sources() -> dict:
    service = get_session_service()
    try:
        items = await service.health.list_sources()
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc
    return {"items": items}


@router.get("/exports")
async def list_exports() -> dict:
    service = get_session_service()
    try:
        files = await service.exporter.list_server_exports()
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc
    return {"files": files}


@router.post("/exports/{name}/download")
async def download_export(name: str) -> dict:
    service = get_session_service()
    try:
        saved = await service.exporter.fetch_server_export(name)
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc
    return {"filename": saved.filename, "size": saved.size, "location": saved.location}


@router.get("/export.csv")
async def export_dataset(filename: str = DEFAULT_FILENAME) -> Response:
    service = get_session_service()
    content = service.exporter.encode_current()
    if content is None:
        raise HTTPException(status_code=404, detail="no extracted data to export")
    safe_name = filename.replace('"', "").strip() or DEFAULT_FILENAME
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}"'},
    )
