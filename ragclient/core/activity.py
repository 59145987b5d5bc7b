"""Append-only log of agent actions shown alongside the chat."""
from __future__ import annotations

from datetime import datetime
from typing import Callable

from ragclient.domain import AgentDescriptor, LogEntry


def _clock() -> str:
    return datetime.now().strftime("%H:%M:%S")


class ActivityLogger:
    """Stores entries in chronological order; ``recent()`` gives the display order."""

    def __init__(self, clock: Callable[[], str] | None = None) -> None:
        self._entries: list[LogEntry] = []
        self._clock = clock or _clock

    def record(self, agent: AgentDescriptor, action: str, detail: str) -> LogEntry:
        entry = LogEntry(agent=agent, action=action, detail=detail, time=self._clock())
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def recent(self) -> list[LogEntry]:
        """Entries most-recent-first."""

        return list(reversed(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def preview(text: str | None, limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, marking truncation with an ellipsis."""

    text = text or ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
