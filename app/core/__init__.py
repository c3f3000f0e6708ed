from .config import settings
from .database import get_db, init_db, check_db_connection
from .context import SessionContext, get_session_context, get_current_context, get_organizer_context

__all__ = [
    "settings",
    "get_db",
    "init_db",
    "check_db_connection",
    "SessionContext",
    "get_session_context",
    "get_current_context",
    "get_organizer_context",
]
