"""Application services."""

from .service import SessionService, configure_session_service, get_session_service, reset_session_service
from .store import SessionBusyError, SessionStore

__all__ = [
    "SessionBusyError",
    "SessionService",
    "SessionStore",
    "configure_session_service",
    "get_session_service",
    "reset_session_service",
]
