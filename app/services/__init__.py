# app/services/__init__.py
from .auth_service import AuthService
from .profile_service import ProfileService
from .dashboard_service import DashboardService, filter_and_sort
from .tournament_service import TournamentService
from .registration_service import RegistrationService
from .assistant_function import AssistantFunction
from .assistant_service import AssistantService

__all__ = [
    "AuthService",
    "ProfileService",
    "DashboardService",
    "filter_and_sort",
    "TournamentService",
    "RegistrationService",
    "AssistantFunction",
    "AssistantService",
]
