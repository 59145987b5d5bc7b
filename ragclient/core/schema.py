"""Response schemas for the RAG backend endpoints.

Parsing is lenient: unknown fields are ignored, ``null`` text becomes an
empty string, and malformed ``export_data`` is dropped rather than rejected.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _records(value: Any) -> list[dict[str, Any]] | None:
    if not isinstance(value, list):
        return None
    rows = [dict(row) for row in value if isinstance(row, dict)]
    return rows or None


class _BackendModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class IntermediateStep(_BackendModel):
    tool: str = ""
    input: str = ""

    @field_validator("tool", "input", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _text(value)


class ChatResponse(_BackendModel):
    response: str = ""
    intermediate_steps: list[IntermediateStep] = Field(default_factory=list)
    export_data: list[dict[str, Any]] | None = None

    @field_validator("response", mode="before")
    @classmethod
    def _response(cls, value: Any) -> str:
        return _text(value)

    @field_validator("intermediate_steps", mode="before")
    @classmethod
    def _steps(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [step for step in value if isinstance(step, dict)]

    @field_validator("export_data", mode="before")
    @classmethod
    def _export(cls, value: Any) -> list[dict[str, Any]] | None:
        return _records(value)


class IngestResponse(_BackendModel):
    status: str = ""
    detail: str = ""

    @field_validator("status", "detail", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _text(value)


class SummarizeResponse(_BackendModel):
    summary: str = ""

    @field_validator("summary", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _text(value)


class ExtractResponse(_BackendModel):
    result: str = ""
    export_data: list[dict[str, Any]] | None = None

    @field_validator("result", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _text(value)

    @field_validator("export_data", mode="before")
    @classmethod
    def _export(cls, value: Any) -> list[dict[str, Any]] | None:
        return _records(value)


class HealthResponse(_BackendModel):
    status: str = ""
    vector_db: str | None = None
    llm_model: str | None = None
    tools: list[Any] | None = None


class ExportListing(_BackendModel):
    files: list[str] = Field(default_factory=list)

    @field_validator("files", mode="before")
    @classmethod
    def _names(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]
