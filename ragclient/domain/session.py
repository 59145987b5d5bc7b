"""Domain entities for a chat session against the RAG backend."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .agents import AgentDescriptor

Record = dict[str, Any]


class Role(str, enum.Enum):
    USER = "user"
    SYSTEM = "system"
    ASSISTANT = "assistant"


class Status(str, enum.Enum):
    IDLE = "idle"
    BUSY = "busy"


class Availability(str, enum.Enum):
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Message:
    """A single transcript entry. Frozen so it cannot change once appended."""

    role: Role
    content: str
    agent: AgentDescriptor | None = None
    timestamp: datetime = field(default_factory=_now)
    export_data: tuple[Record, ...] | None = None
    is_error: bool = False


@dataclass(frozen=True, slots=True)
class LogEntry:
    agent: AgentDescriptor
    action: str
    detail: str
    time: str


@dataclass(frozen=True, slots=True)
class ChartBucket:
    label: str
    count: int


@dataclass(slots=True)
class BackendInfo:
    """Best-effort details reported by the backend health endpoint."""

    vector_db: str | None = None
    llm_model: str | None = None
    tool_count: int | None = None


@dataclass(slots=True)
class SessionState:
    """Aggregated in-memory state for one client session."""

    status: Status = Status.IDLE
    status_label: str = ""
    transcript: list[Message] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    dataset: list[Record] = field(default_factory=list)
    buckets: list[ChartBucket] = field(default_factory=list)
    availability: Availability = Availability.UNKNOWN
    backend_info: BackendInfo = field(default_factory=BackendInfo)
    url_draft: str = ""
