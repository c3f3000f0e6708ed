# app/api/auth.py
import logging
import secrets

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.config import settings
from app.core.context import SessionContext, get_session_context, get_current_context
from app.core.errors import AuthenticationRequired, ServiceUnavailable, ValidationFailed
from app.core.oauth import oauth, oauth_enabled
from app.schemas.auth import (
    SignUpRequest,
    SignInRequest,
    TokenResponse,
    RefreshTokenRequest,
)
from app.services.auth_service import AuthService, SUPPORTED_OAUTH_PROVIDERS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sign-up", response_model=TokenResponse, status_code=201, summary="Create an account")
def sign_up(
    data: SignUpRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """
    Email/password sign-up.

    Organizers receive a 4-digit organizer code; team players may pass one
    to link themselves to that organizer.
    """
    return AuthService(db, ctx).sign_up(data)


@router.post("/sign-in", response_model=TokenResponse, summary="Sign in with email and password")
def sign_in(
    data: SignInRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return AuthService(db, ctx).sign_in(data.email, data.password)


# ==================== OAUTH ====================

def _oauth_client(provider: str):
    if provider not in SUPPORTED_OAUTH_PROVIDERS:
        raise ValidationFailed(f"Unsupported OAuth provider: {provider}")
    if not oauth_enabled(provider):
        raise ServiceUnavailable(f"{provider.capitalize()} sign-in is not configured")
    return oauth.create_client(provider)


@router.get("/oauth/{provider}/login", summary="Start an OAuth sign-in")
async def oauth_login(provider: str, request: Request):
    """Redirects to the provider's consent page"""
    client = _oauth_client(provider)
    redirect_uri = settings.OAUTH_REDIRECT_URL or str(
        request.url_for("oauth_callback", provider=provider)
    )
    state = secrets.token_urlsafe(16)
    request.session["oauth_state"] = state
    return await client.authorize_redirect(request, redirect_uri, state=state)


@router.get(
    "/oauth/{provider}/callback",
    name="oauth_callback",
    response_model=TokenResponse,
    summary="Finish an OAuth sign-in",
)
async def oauth_callback(
    provider: str,
    request: Request,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    client = _oauth_client(provider)

    expected_state = request.session.pop("oauth_state", None)
    if not expected_state or expected_state != request.query_params.get("state"):
        raise AuthenticationRequired("Invalid OAuth state")

    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        logger.warning(f"OAuth {provider} token exchange failed: {e.error}")
        raise AuthenticationRequired("Could not authorize with the provider")

    user_info = token.get("userinfo") or {}
    return AuthService(db, ctx).sign_in_with_oauth(
        provider,
        subject=user_info.get("sub"),
        email=user_info.get("email"),
        display_name=user_info.get("name"),
    )


# ==================== SESSION ====================

@router.post("/sign-out", summary="Sign out")
def sign_out(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    """Revokes the current session; its tokens stop working"""
    AuthService(db, ctx).sign_out()
    return {"message": "Signed out"}


@router.post("/refresh", response_model=TokenResponse, summary="Refresh tokens")
def refresh_token(
    request: RefreshTokenRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return AuthService(db, ctx).refresh(request.refresh_token)
