"""Authoritative in-memory state for a client session."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any, Iterable, Iterator, Mapping

from ragclient.core.charts import aggregate
from ragclient.domain import (
    AgentDescriptor,
    Availability,
    BackendInfo,
    ChartBucket,
    Message,
    Record,
    Role,
    SessionState,
    Status,
)
from ragclient.domain.agents import ROUTER

WELCOME_MESSAGE = (
    "Welcome! I'm your multi-agent RAG assistant. Add some URLs as sources, "
    "then ask me anything about those pages."
)


class SessionBusyError(RuntimeError):
    """Raised when a workflow is triggered while another one is in flight."""


class SessionStore:
    """Holds the session state; controllers are the only writers.

    The status gate is a check-and-set under a lock so that at most one
    workflow can hold the session at a time.
    """

    def __init__(self, *, welcome: bool = True) -> None:
        self._state = SessionState()
        self._gate = threading.Lock()
        if welcome:
            self._state.transcript.append(Message(role=Role.SYSTEM, content=WELCOME_MESSAGE, agent=ROUTER))

    # ------------------------------------------------------------------
    # status machine
    # ------------------------------------------------------------------
    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def status_label(self) -> str:
        return self._state.status_label

    @property
    def is_busy(self) -> bool:
        return self._state.status is Status.BUSY

    def begin(self, label: str = "") -> None:
        with self._gate:
            if self._state.status is Status.BUSY:
                raise SessionBusyError(f"A workflow is already running: {self._state.status_label or 'busy'}")
            self._state.status = Status.BUSY
            self._state.status_label = label

    def finish(self) -> None:
        with self._gate:
            self._state.status = Status.IDLE
            self._state.status_label = ""

    @contextmanager
    def workflow(self, label: str = "") -> Iterator[None]:
        """Hold the session BUSY for the duration of the block."""

        self.begin(label)
        try:
            yield
        finally:
            self.finish()

    # ------------------------------------------------------------------
    # transcript
    # ------------------------------------------------------------------
    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._state.transcript)

    def append_message(
        self,
        role: Role,
        content: str,
        *,
        agent: AgentDescriptor | None = None,
        export_data: Iterable[Record] | None = None,
        is_error: bool = False,
    ) -> Message:
        rows = tuple(dict(row) for row in export_data) if export_data else None
        message = Message(role=role, content=content, agent=agent, export_data=rows, is_error=is_error)
        self._state.transcript.append(message)
        return message

    # ------------------------------------------------------------------
    # sources
    # ------------------------------------------------------------------
    @property
    def sources(self) -> tuple[str, ...]:
        return tuple(self._state.sources)

    def extend_sources(self, urls: Iterable[str]) -> None:
        self._state.sources.extend(urls)

    @property
    def url_draft(self) -> str:
        return self._state.url_draft

    def set_url_draft(self, text: str) -> None:
        self._state.url_draft = text

    # ------------------------------------------------------------------
    # extracted dataset
    # ------------------------------------------------------------------
    @property
    def dataset(self) -> list[Record]:
        return [dict(row) for row in self._state.dataset]

    @property
    def buckets(self) -> tuple[ChartBucket, ...]:
        return tuple(self._state.buckets)

    def set_dataset(self, rows: Iterable[Mapping[str, Any]]) -> list[ChartBucket]:
        """Replace the current dataset and recompute its chart buckets."""

        self._state.dataset = [dict(row) for row in rows]
        self._state.buckets = aggregate(self._state.dataset)
        return list(self._state.buckets)

    # ------------------------------------------------------------------
    # backend availability
    # ------------------------------------------------------------------
    @property
    def availability(self) -> Availability:
        return self._state.availability

    @property
    def backend_info(self) -> BackendInfo:
        info = self._state.backend_info
        return BackendInfo(vector_db=info.vector_db, llm_model=info.llm_model, tool_count=info.tool_count)

    def mark_online(
        self,
        *,
        vector_db: str | None = None,
        llm_model: str | None = None,
        tool_count: int | None = None,
    ) -> None:
        """Set ONLINE, overwriting only the info fields that were reported."""

        self._state.availability = Availability.ONLINE
        info = self._state.backend_info
        if vector_db:
            info.vector_db = vector_db
        if llm_model:
            info.llm_model = llm_model
        if tool_count is not None:
            info.tool_count = tool_count

    def mark_offline(self) -> None:
        self._state.availability = Availability.OFFLINE

    # ------------------------------------------------------------------
    # read model
    # ------------------------------------------------------------------
    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the session for renderers."""

        return {
            "status": self._state.status.value,
            "status_label": self._state.status_label,
            "availability": self._state.availability.value,
            "backend_info": asdict(self._state.backend_info),
            "transcript": [_serialise_message(message) for message in self._state.transcript],
            "sources": list(self._state.sources),
            "url_draft": self._state.url_draft,
            "dataset": self.dataset,
            "buckets": [asdict(bucket) for bucket in self._state.buckets],
        }


def _serialise_agent(agent: AgentDescriptor | None) -> dict[str, str] | None:
    return asdict(agent) if agent is not None else None


def _serialise_message(message: Message) -> dict[str, Any]:
    return {
        "role": message.role.value,
        "content": message.content,
        "agent": _serialise_agent(message.agent),
        "timestamp": message.timestamp.isoformat(),
        "export_data": [dict(row) for row in message.export_data] if message.export_data else None,
        "is_error": message.is_error,
    }


def serialise_log(entries: Iterable[Any]) -> list[dict[str, Any]]:
    return [
        {
            "agent": _serialise_agent(entry.agent),
            "action": entry.action,
            "detail": entry.detail,
            "time": entry.time,
        }
        for entry in entries
    ]
