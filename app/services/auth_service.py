import logging
import secrets
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.context import SessionContext, AuthEvent, auth_events
from app.core.errors import AuthenticationRequired, AccessDenied, ValidationFailed
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from app.models.users import User, Profile, AuthSession, UserType
from app.schemas.auth import SignUpRequest, TokenResponse

logger = logging.getLogger(__name__)

SUPPORTED_OAUTH_PROVIDERS = ("google",)


class AuthService:
    """Sign-up, sign-in, OAuth, sign-out and refresh for one request context"""

    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    # ══════════════════════════════════════════════════════════
    # SIGN UP / SIGN IN
    # ══════════════════════════════════════════════════════════

    def sign_up(self, data: SignUpRequest) -> TokenResponse:
        email = data.email.lower()

        if self._email_taken(email):
            raise ValidationFailed("An account with this email already exists")

        if self._username_taken(data.username):
            raise ValidationFailed("This username is already taken")

        linked_organizer_id = None
        organizer_code = None

        if data.user_type == UserType.ORGANIZER:
            organizer_code = self._generate_organizer_code()
        elif data.organizer_code:
            organizer = self.db.query(Profile).filter(
                Profile.organizer_code == data.organizer_code,
                Profile.user_type == UserType.ORGANIZER,
            ).first()
            if organizer is None:
                raise ValidationFailed("Invalid organizer code")
            linked_organizer_id = organizer.id

        try:
            user = User(email=email, password_hash=hash_password(data.password))
            self.db.add(user)
            self.db.flush()  # user.id is needed for the profile

            self.db.add(Profile(
                id=user.id,
                username=data.username,
                email=email,
                in_game_name=data.in_game_name,
                user_type=data.user_type,
                organizer_code=organizer_code,
                linked_organizer_id=linked_organizer_id,
                level=1,
                wins=0,
                total_matches=0,
                earnings=0,
            ))
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ValidationFailed("An account with this email or username already exists")

        logger.info(f"New {data.user_type.value} account: {data.username}")
        return self._start_session(user, provider="password", is_new_user=True)

    def sign_in(self, email: str, password: str) -> TokenResponse:
        user = self.db.query(User).filter(User.email == email.lower()).first()

        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationRequired("Invalid email or password")

        if not user.is_active:
            raise AccessDenied("This account is blocked")

        return self._start_session(user, provider="password")

    def sign_in_with_oauth(
        self,
        provider: str,
        subject: str,
        email: str,
        display_name: Optional[str] = None,
    ) -> TokenResponse:
        """
        Finish an OAuth sign-in once the provider has vouched for the identity.

        Links by (provider, subject) first, then by email; otherwise creates a
        team account named after the email's local part.
        """
        if provider not in SUPPORTED_OAUTH_PROVIDERS:
            raise ValidationFailed(f"Unsupported OAuth provider: {provider}")

        if not subject or not email:
            raise ValidationFailed("The provider did not return an email and subject")

        email = email.lower()
        user = self.db.query(User).filter(
            User.oauth_provider == provider,
            User.oauth_subject == subject,
        ).first()
        is_new_user = False

        if user is None:
            user = self.db.query(User).filter(User.email == email).first()
            if user is not None:
                user.oauth_provider = provider
                user.oauth_subject = subject

        if user is None:
            is_new_user = True
            user = User(email=email, oauth_provider=provider, oauth_subject=subject)
            self.db.add(user)
            self.db.flush()

            username = self._unique_username(email.split("@")[0])
            self.db.add(Profile(
                id=user.id,
                username=username,
                email=email,
                in_game_name=(display_name or username)[:50],
                user_type=UserType.TEAM,
            ))

        if not user.is_active:
            raise AccessDenied("This account is blocked")

        return self._start_session(user, provider=provider, is_new_user=is_new_user)

    # ══════════════════════════════════════════════════════════
    # SESSION LIFECYCLE
    # ══════════════════════════════════════════════════════════

    def sign_out(self) -> None:
        auth_session = self.ctx.session
        if auth_session is None:
            raise AuthenticationRequired()

        auth_session.revoked_at = datetime.now(timezone.utc)
        self.db.commit()

        self.ctx.apply(AuthEvent.SIGNED_OUT, None)
        auth_events.publish(AuthEvent.SIGNED_OUT, auth_session)

    def refresh(self, refresh_token: str) -> TokenResponse:
        payload = decode_token(refresh_token)
        if payload is None or payload.get("type") != "refresh":
            raise AuthenticationRequired("Token is invalid or expired")

        auth_session = self.db.query(AuthSession).filter(
            AuthSession.id == _as_uuid(payload.get("sid"))
        ).first()
        if auth_session is None or not auth_session.is_active:
            raise AuthenticationRequired("Session has ended")

        user = auth_session.user
        if str(user.id) != payload.get("sub"):
            raise AuthenticationRequired("Token is invalid or expired")
        if not user.is_active:
            raise AccessDenied("This account is blocked")

        auth_session.last_refreshed_at = datetime.now(timezone.utc)
        self.db.commit()

        self.ctx.apply(AuthEvent.TOKEN_REFRESHED, auth_session)
        auth_events.publish(AuthEvent.TOKEN_REFRESHED, auth_session)
        return self._issue_tokens(user, auth_session)

    # ══════════════════════════════════════════════════════════
    # HELPERS
    # ══════════════════════════════════════════════════════════

    def _start_session(self, user: User, provider: str, is_new_user: bool = False) -> TokenResponse:
        auth_session = AuthSession(user_id=user.id, provider=provider)
        self.db.add(auth_session)
        self.db.commit()
        self.db.refresh(auth_session)

        self.ctx.apply(AuthEvent.SIGNED_IN, auth_session)
        auth_events.publish(AuthEvent.SIGNED_IN, auth_session)
        return self._issue_tokens(user, auth_session, is_new_user=is_new_user)

    def _issue_tokens(self, user: User, auth_session: AuthSession, is_new_user: bool = False) -> TokenResponse:
        token_data = {"sub": str(user.id), "sid": str(auth_session.id), "email": user.email}
        return TokenResponse(
            access_token=create_access_token(token_data),
            refresh_token=create_refresh_token(token_data),
            token_type="bearer",
            is_new_user=is_new_user,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    def _generate_organizer_code(self) -> str:
        # 9000 possible codes; give up loudly rather than loop forever
        for _ in range(50):
            code = f"{secrets.randbelow(9000) + 1000}"
            if not self.db.query(Profile).filter(Profile.organizer_code == code).first():
                return code
        raise ValidationFailed("Could not allocate an organizer code, try again")

    def _email_taken(self, email: str) -> bool:
        return self.db.query(User).filter(User.email == email).first() is not None

    def _username_taken(self, username: str) -> bool:
        return self.db.query(Profile).filter(Profile.username == username).first() is not None

    def _unique_username(self, base: str) -> str:
        base = (base or "player")[:40]
        if len(base) < 3:
            base = f"{base}_player"
        username = base
        attempts = 0
        while self._username_taken(username):
            attempts += 1
            username = f"{base}_{secrets.randbelow(9000) + 1000}"
            if attempts > 10:
                username = f"{base}_{secrets.token_hex(4)}"
                break
        return username


def _as_uuid(value):
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise AuthenticationRequired("Token is invalid or expired")
