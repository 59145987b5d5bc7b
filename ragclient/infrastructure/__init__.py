"""Infrastructure layer exports."""

from .downloads import FileSaver, LocalDownloadSaver, SavedFile, configure_file_saver, get_file_saver
from .gateway import AsyncGateway, GatewayError

__all__ = [
    "AsyncGateway",
    "FileSaver",
    "GatewayError",
    "LocalDownloadSaver",
    "SavedFile",
    "configure_file_saver",
    "get_file_saver",
]
