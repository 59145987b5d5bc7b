"""Application service wiring one client session together."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from ragclient.application.health import HealthMonitor
from ragclient.application.store import SessionStore, serialise_log
from ragclient.application.workflows import (
    ChatController,
    ExtractionController,
    IngestionController,
    SummarizeController,
)
from ragclient.core.activity import ActivityLogger
from ragclient.core.settings import ClientSettings
from ragclient.exporters.dataset_csv import DatasetExporter
from ragclient.infrastructure import AsyncGateway, FileSaver, get_file_saver

logger = logging.getLogger(__name__)


class SessionService:
    """Coordinates the controllers, store and exporter for one session."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        saver: FileSaver | None = None,
    ) -> None:
        self.settings = settings or ClientSettings.from_env()
        self.store = SessionStore()
        self.activity = ActivityLogger()
        self.gateway = AsyncGateway(self.settings.api_base, timeout=self.settings.timeout, http_client=http_client)

        self.ingestion = IngestionController(self.store, self.gateway, self.activity)
        self.chat = ChatController(self.store, self.gateway, self.activity)
        self.extraction = ExtractionController(self.store, self.gateway, self.activity)
        self.summaries = SummarizeController(self.store, self.gateway, self.activity)
        self.health = HealthMonitor(self.store, self.gateway)
        self.exporter = DatasetExporter(
            self.store,
            self.gateway,
            self.activity,
            saver or get_file_saver(self.settings.downloads_root),
        )

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    async def startup(self) -> None:
        """Initial availability check for a fresh session."""

        availability = await self.health.refresh()
        logger.info("Backend %s is %s", self.settings.api_base, availability.value)

    async def aclose(self) -> None:
        await self.gateway.aclose()

    # ------------------------------------------------------------------
    # read model
    # ------------------------------------------------------------------
    def snapshot(self) -> dict[str, Any]:
        data = self.store.snapshot()
        data["activity"] = serialise_log(self.activity.recent())
        data["api_base"] = self.settings.api_base
        return data


_service: SessionService | None = None


def get_session_service() -> SessionService:
    """Return the process-wide session, creating it on first use."""

    global _service
    if _service is None:
        _service = SessionService()
    return _service


def configure_session_service(service: SessionService | None) -> None:
    """Install the session used by the HTTP routes (tests pass fakes here)."""

    global _service
    _service = service


def reset_session_service() -> None:
    """Drop the current session (used in tests)."""

    configure_session_service(None)
