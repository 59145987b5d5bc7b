"""Domain layer definitions."""

from .agents import AgentDescriptor, agent_for_tool, is_extraction_tool
from .session import (
    Availability,
    BackendInfo,
    ChartBucket,
    LogEntry,
    Message,
    Record,
    Role,
    SessionState,
    Status,
)

__all__ = [
    "AgentDescriptor",
    "Availability",
    "BackendInfo",
    "ChartBucket",
    "LogEntry",
    "Message",
    "Record",
    "Role",
    "SessionState",
    "Status",
    "agent_for_tool",
    "is_extraction_tool",
]
