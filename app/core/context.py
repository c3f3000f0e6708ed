"""
Explicit per-request auth context.

Routes build a ``SessionContext`` from the bearer token and hand it to the
services they construct, so no code reads a process-wide "current user".
"""

import enum
import logging
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .database import get_db
from .errors import AuthenticationRequired, AccessDenied
from .security import decode_token

logger = logging.getLogger(__name__)


class AuthEvent(str, enum.Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"
    USER_UPDATED = "user_updated"


AuthListener = Callable[[AuthEvent, object], None]


class AuthEventBus:
    """Session-change notifications (in-process)"""

    def __init__(self):
        self._listeners: List[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: AuthEvent, session) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception(f"Auth listener failed on {event.value}")


auth_events = AuthEventBus()


class SessionContext:
    """Current user, profile and sign-in session for one request"""

    def __init__(self, db: Session, user=None, profile=None, session=None):
        self.db = db
        self.user = user
        self.profile = profile
        self.session = session

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.profile is not None

    @property
    def user_id(self) -> Optional[UUID]:
        return self.user.id if self.user else None

    def initialize(self, token: str) -> "SessionContext":
        """Load user and profile from a persisted session; stays anonymous on any mismatch"""
        from app.models.users import AuthSession

        payload = decode_token(token)
        if payload is None or payload.get("type") != "access":
            return self

        session_id = payload.get("sid")
        if session_id is None:
            return self

        try:
            session_uuid = UUID(session_id)
        except ValueError:
            return self

        auth_session = self.db.query(AuthSession).filter(AuthSession.id == session_uuid).first()
        if auth_session is None or not auth_session.is_active:
            return self

        if str(auth_session.user_id) != payload.get("sub"):
            return self

        user = auth_session.user
        if user is None or not user.is_active:
            return self

        self.session = auth_session
        self.user = user
        self.profile = user.profile
        return self

    def apply(self, event: AuthEvent, session) -> None:
        """Follow a session-change event"""
        if event == AuthEvent.SIGNED_OUT or session is None:
            self.teardown()
            return

        self.session = session
        self.user = session.user
        self.profile = session.user.profile if session.user else None

    def teardown(self) -> None:
        self.session = None
        self.user = None
        self.profile = None

    def require_user(self, detail: Optional[str] = None):
        """Profile of the signed-in caller, or the authentication-required error"""
        if not self.is_authenticated:
            raise AuthenticationRequired(detail)
        return self.profile

    def require_organizer(self):
        profile = self.require_user()
        if not profile.is_organizer:
            raise AccessDenied(
                "Only tournament organizers can create tournaments. "
                "You are currently registered as a team player."
            )
        return profile


# ══════════════════════════════════════════════════════════
# FASTAPI DEPENDENCIES
# ══════════════════════════════════════════════════════════

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> SessionContext:
    """Context for routes that also serve anonymous callers"""
    ctx = SessionContext(db)
    if credentials is not None:
        ctx.initialize(credentials.credentials)
    return ctx


def get_current_context(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Context for protected routes"""
    ctx.require_user("Token is missing, invalid or expired")
    return ctx


def get_organizer_context(ctx: SessionContext = Depends(get_current_context)) -> SessionContext:
    ctx.require_organizer()
    return ctx
