"""User-triggered workflows: ingestion, chat turns, direct extraction, summaries.

Each controller holds the session BUSY for exactly one backend call, records
what happened in the activity log and the transcript, and always hands the
session back IDLE. Backend failures are recovered here and never propagate.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from ragclient.application.store import SessionStore
from ragclient.core.activity import ActivityLogger, preview
from ragclient.core.schema import ChatResponse, ExtractResponse, IngestResponse, SummarizeResponse
from ragclient.domain import Message, Role, agent_for_tool, is_extraction_tool
from ragclient.domain.agents import EXPORT, EXTRACTOR, QA, ROUTER, SCRAPER, SUMMARIZER, AgentDescriptor
from ragclient.infrastructure import AsyncGateway, GatewayError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ALL_SOURCES = "all"
ROUTE_PREVIEW_CHARS = 50
TOOL_PREVIEW_CHARS = 80


def parse_urls(raw_text: str | None) -> list[str]:
    """One candidate URL per line; blank lines are dropped."""

    return [line.strip() for line in (raw_text or "").splitlines() if line.strip()]


def _parse(model: type[ModelT], body: Any) -> ModelT:
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise GatewayError("Invalid response from server") from exc


class _Workflow:
    def __init__(self, store: SessionStore, gateway: AsyncGateway, activity: ActivityLogger) -> None:
        self._store = store
        self._gateway = gateway
        self._activity = activity

    def _fail(self, agent: AgentDescriptor, exc: GatewayError, content: str) -> Message:
        self._activity.record(agent, "error", exc.message)
        return self._store.append_message(Role.SYSTEM, f"❌ {content}", agent=agent, is_error=True)

    def _publish_dataset(self, rows: Sequence[Mapping[str, Any]]) -> None:
        self._store.set_dataset(rows)
        self._activity.record(EXPORT, "data-ready", f"{len(rows)} record(s) ready for export")


class IngestionController(_Workflow):
    async def ingest(self, raw_text: str | None = None) -> Message | None:
        """Submit the URLs in ``raw_text`` (or the pending draft) for indexing."""

        if raw_text is None:
            raw_text = self._store.url_draft
        urls = parse_urls(raw_text)
        if not urls:
            return None

        with self._store.workflow(f"Ingesting {len(urls)} URL(s)..."):
            self._store.set_url_draft(raw_text)
            self._activity.record(SCRAPER, "start", f"Ingesting {len(urls)} URL(s)")
            logger.info("Ingesting %d URL(s)", len(urls))
            try:
                body = await self._gateway.call("ingest", {"urls": urls})
                result = _parse(IngestResponse, body)
            except GatewayError as exc:
                return self._fail(SCRAPER, exc, f"Ingestion failed: {exc.message}")

            self._store.extend_sources(urls)
            self._store.set_url_draft("")
            self._activity.record(SCRAPER, "done", result.detail)
            return self._store.append_message(Role.SYSTEM, f"✅ {result.detail}", agent=SCRAPER)


class ChatController(_Workflow):
    async def send(self, text: str | None) -> Message | None:
        text = (text or "").strip()
        if not text:
            return None

        with self._store.workflow("Thinking..."):
            # Optimistic: the user's message stays even if the call fails.
            self._store.append_message(Role.USER, text)
            self._activity.record(ROUTER, "route", f'Analyzing: "{preview(text, ROUTE_PREVIEW_CHARS)}"')
            try:
                body = await self._gateway.call("chat", {"message": text})
                reply = _parse(ChatResponse, body)
            except GatewayError as exc:
                return self._fail(
                    ROUTER,
                    exc,
                    f"Error: {exc.message}\n\nMake sure the backend server is running on {self._gateway.api_base}",
                )

            extracted = False
            for step in reply.intermediate_steps:
                self._activity.record(
                    agent_for_tool(step.tool),
                    f"tool: {step.tool}",
                    f"Input: {preview(step.input, TOOL_PREVIEW_CHARS)}",
                )
                extracted = extracted or is_extraction_tool(step.tool)

            rows = reply.export_data or []
            message = self._store.append_message(
                Role.ASSISTANT,
                reply.response,
                agent=EXTRACTOR if extracted else QA,
                export_data=rows or None,
            )
            if rows:
                self._publish_dataset(rows)
            self._activity.record(QA, "done", "Response delivered")
            return message


class ExtractionController(_Workflow):
    """Direct extraction path that skips the chat agent's tool routing."""

    async def extract(self, extract_type: str | None, query: str | None = None) -> Message | None:
        extract_type = (extract_type or "").strip()
        if not extract_type:
            return None
        query = (query or "").strip() or ALL_SOURCES

        with self._store.workflow(f"Extracting {extract_type}..."):
            self._activity.record(EXTRACTOR, "start", f"{extract_type} from {query}")
            try:
                body = await self._gateway.call("extract", {"extract_type": extract_type, "query": query})
                result = _parse(ExtractResponse, body)
            except GatewayError as exc:
                return self._fail(EXTRACTOR, exc, f"Extraction failed: {exc.message}")

            rows = result.export_data or []
            content = result.result or f"Extracted {len(rows)} record(s)."
            message = self._store.append_message(
                Role.ASSISTANT,
                content,
                agent=EXTRACTOR,
                export_data=rows or None,
            )
            if rows:
                self._publish_dataset(rows)
            self._activity.record(EXTRACTOR, "done", f"{len(rows)} record(s) extracted")
            return message


class SummarizeController(_Workflow):
    async def summarize(self, url: str | None) -> Message | None:
        url = (url or "").strip()
        if not url:
            return None

        with self._store.workflow("Summarizing..."):
            self._activity.record(SUMMARIZER, "start", url)
            try:
                body = await self._gateway.call("summarize", {"url": url})
                result = _parse(SummarizeResponse, body)
            except GatewayError as exc:
                return self._fail(SUMMARIZER, exc, f"Summary failed: {exc.message}")

            self._activity.record(SUMMARIZER, "done", url)
            return self._store.append_message(Role.ASSISTANT, result.summary, agent=SUMMARIZER)
