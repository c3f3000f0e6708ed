# app/schemas/__init__.py
from .auth import SignUpRequest, SignInRequest, TokenResponse, RefreshTokenRequest
from .user import ProfileResponse, ProfileUpdate
from .tournament import (
    SortKey,
    StatusFilter,
    TournamentCreate,
    TournamentResponse,
    TournamentDetailResponse,
    DashboardStats,
    DashboardResponse,
    RegistrationResponse,
    JoinTournamentResponse,
)
from .chat import (
    TeamDetails,
    ListTournaments,
    TournamentDetails,
    RegisterForTournament,
    Chat,
    AssistantRequest,
    AssistantFunctionPayload,
    ConfirmPaymentRequest,
    SendMessageRequest,
    SelectTournamentRequest,
    SelectTournamentResponse,
    AssistantMessageResponse,
    TranscriptResponse,
)

__all__ = [
    # Auth
    "SignUpRequest",
    "SignInRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    # User
    "ProfileResponse",
    "ProfileUpdate",
    # Tournament
    "SortKey",
    "StatusFilter",
    "TournamentCreate",
    "TournamentResponse",
    "TournamentDetailResponse",
    "DashboardStats",
    "DashboardResponse",
    "RegistrationResponse",
    "JoinTournamentResponse",
    # Assistant
    "TeamDetails",
    "ListTournaments",
    "TournamentDetails",
    "RegisterForTournament",
    "Chat",
    "AssistantRequest",
    "AssistantFunctionPayload",
    "ConfirmPaymentRequest",
    "SendMessageRequest",
    "SelectTournamentRequest",
    "SelectTournamentResponse",
    "AssistantMessageResponse",
    "TranscriptResponse",
]
