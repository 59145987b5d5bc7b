from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_API_BASE = "http://localhost:8000"
DEFAULT_TIMEOUT = 120.0
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _downloads_root() -> Path:
    env_root = os.getenv("RAG_DOWNLOADS_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "downloads"


def _timeout() -> float:
    raw = os.getenv("RAG_CLIENT_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def _cors_origins() -> list[str]:
    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)


@dataclass(slots=True)
class ClientSettings:
    """Runtime configuration for the session client."""

    api_base: str = DEFAULT_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    downloads_root: Path = field(default_factory=_downloads_root)
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_base=(os.getenv("RAG_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            timeout=_timeout(),
            downloads_root=_downloads_root(),
            cors_origins=_cors_origins(),
        )
