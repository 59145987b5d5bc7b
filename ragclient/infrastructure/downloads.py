"""File-save hooks used to hand export artifacts to the host.

The session engine never writes files itself. It passes bytes to a
``FileSaver``; the default implementation drops them in a local downloads
folder, and an embedding host can call ``configure_file_saver`` to route them
elsewhere (a browser download, a temp dir in tests, ...).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class FileSaver(Protocol):
    """Contract for host download mechanisms."""

    def save(self, filename: str, content: bytes, media_type: str) -> "SavedFile":
        """Persist or hand off ``content`` under ``filename``."""


@dataclass(slots=True)
class SavedFile:
    filename: str
    size: int
    location: str | None = None


class LocalDownloadSaver:
    """Writes artifacts under a downloads directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def save(self, filename: str, content: bytes, media_type: str) -> SavedFile:
        safe_name = Path(filename).name or "download"
        self._root.mkdir(parents=True, exist_ok=True)
        target = self._root / safe_name
        target.write_bytes(content)
        return SavedFile(filename=safe_name, size=len(content), location=str(target))


_saver: FileSaver | None = None


def configure_file_saver(saver: FileSaver | None) -> None:
    """Install the saver used for exports (``None`` restores the default)."""

    global _saver
    _saver = saver


def get_file_saver(default_root: Path) -> FileSaver:
    """Return the configured saver, falling back to a local downloads folder."""

    if _saver is None:
        return LocalDownloadSaver(default_root)
    return _saver
