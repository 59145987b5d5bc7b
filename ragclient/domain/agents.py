"""Agent descriptors used to attribute transcript and log entries."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AgentDescriptor:
    """Display tag for one of the logical agents of the RAG service."""

    id: str
    display_name: str
    icon: str
    color: str


SCRAPER = AgentDescriptor(id="scraper", display_name="Web Scraper", icon="🕷️", color="#10b981")
SUMMARIZER = AgentDescriptor(id="summarizer", display_name="Summarizer", icon="📝", color="#6366f1")
QA = AgentDescriptor(id="qa", display_name="Q&A Agent", icon="💬", color="#f59e0b")
ROUTER = AgentDescriptor(id="router", display_name="Router", icon="🔀", color="#ec4899")
EXTRACTOR = AgentDescriptor(id="extractor", display_name="Data Extractor", icon="🧲", color="#14b8a6")
EXPORT = AgentDescriptor(id="export", display_name="Export", icon="📦", color="#3b82f6")

ALL_AGENTS: tuple[AgentDescriptor, ...] = (SCRAPER, SUMMARIZER, QA, ROUTER, EXTRACTOR, EXPORT)

TOOL_AGENTS: dict[str, AgentDescriptor] = {
    "web_scraper": SCRAPER,
    "page_summarizer": SUMMARIZER,
    "contact_extractor": EXTRACTOR,
    "custom_extractor": EXTRACTOR,
}

# Substring in a tool name that marks a structured-data extraction step.
EXTRACTION_MARKER = "extract"


def agent_for_tool(tool: str | None) -> AgentDescriptor:
    """Return the agent a backend tool invocation is attributed to.

    Unknown tool names fall back to the Q&A agent.
    """

    return TOOL_AGENTS.get((tool or "").strip(), QA)


def is_extraction_tool(tool: str | None) -> bool:
    return EXTRACTION_MARKER in (tool or "")
