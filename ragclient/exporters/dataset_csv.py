from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ragclient.core.activity import ActivityLogger
from ragclient.core.csvio import encode_records_to_csv
from ragclient.core.schema import ExportListing
from ragclient.domain.agents import EXPORT
from ragclient.infrastructure import AsyncGateway, FileSaver, GatewayError, SavedFile

if TYPE_CHECKING:
    from ragclient.application.store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "export.csv"
CSV_MEDIA_TYPE = "text/csv"
EXPORTS_NAMESPACE = "exports"


def export_records(saver: FileSaver, rows: Sequence[Mapping[str, Any]], filename: str | None = None) -> SavedFile | None:
    """Encode ``rows`` as CSV and hand them to ``saver``; no-op for an empty dataset."""

    if not rows:
        return None
    payload = encode_records_to_csv(rows).encode("utf-8")
    return saver.save(filename or DEFAULT_FILENAME, payload, CSV_MEDIA_TYPE)


class DatasetExporter:
    """Client-side CSV export of the current dataset plus backend export files."""

    def __init__(
        self,
        store: SessionStore,
        gateway: AsyncGateway,
        activity: ActivityLogger,
        saver: FileSaver,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._activity = activity
        self._saver = saver

    def encode_current(self) -> str | None:
        rows = self._store.dataset
        if not rows:
            return None
        return encode_records_to_csv(rows)

    def export_current(self, filename: str | None = None) -> SavedFile | None:
        saved = export_records(self._saver, self._store.dataset, filename)
        if saved is not None:
            self._activity.record(EXPORT, "saved", f"{saved.filename} ({saved.size} bytes)")
            logger.info("Exported dataset to %s", saved.location or saved.filename)
        return saved

    async def list_server_exports(self) -> list[str]:
        body = await self._gateway.probe(EXPORTS_NAMESPACE)
        if not isinstance(body, dict):
            return []
        return ExportListing.model_validate(body).files

    async def fetch_server_export(self, name: str) -> SavedFile:
        name = name.strip()
        if not name:
            raise GatewayError("Export file name is required")
        content = await self._gateway.fetch(EXPORTS_NAMESPACE, name)
        saved = self._saver.save(name, content, _media_type(name))
        self._activity.record(EXPORT, "downloaded", f"{saved.filename} ({saved.size} bytes)")
        return saved


def _media_type(name: str) -> str:
    lowered = name.lower()
    if lowered.endswith(".csv"):
        return CSV_MEDIA_TYPE
    if lowered.endswith(".json"):
        return "application/json"
    if lowered.endswith(".xlsx"):
        return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    return "application/octet-stream"
