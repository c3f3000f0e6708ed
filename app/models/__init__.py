from app.models.users import User, Profile, AuthSession, UserType
from app.models.tournaments import Tournament, Registration, TournamentStatus, TournamentType, PaymentStatus
from app.models.chat import AssistantMessage, AssistantMessageKind

__all__ = [
    "User",
    "Profile",
    "AuthSession",
    "UserType",
    "Tournament",
    "Registration",
    "TournamentStatus",
    "TournamentType",
    "PaymentStatus",
    "AssistantMessage",
    "AssistantMessageKind",
]
