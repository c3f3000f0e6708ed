"""
Tournament assistant function.

Takes one narrowed ``AssistantRequest`` variant and returns the JSON body
the function endpoint sends back. The in-app assistant calls it directly;
external clients reach it over HTTP.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.context import SessionContext
from app.core.errors import AppError
from app.models.tournaments import Tournament, TournamentStatus
from app.schemas.chat import (
    AssistantRequest,
    ListTournaments,
    TournamentDetails,
    RegisterForTournament,
    Chat,
    TeamDetails,
)
from app.schemas.tournament import TournamentResponse, RegistrationResponse
from app.services.gemini_client import GeminiClient
from app.services.payment import registration_upi_string, qr_code_url
from app.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "General tournament assistance"

SYSTEM_PROMPT = """You are a professional BGMI (PUBG Mobile) tournament assistant with FULL ACCESS to the tournament platform. You can help users with:

1. **Tournament Information**: View and explain tournament details, rules, schedules
2. **Registration Process**: Help users register for tournaments by collecting team details
3. **Payment Processing**: Generate payment QR codes and handle payment confirmation
4. **Slot Management**: Check availability and book tournament slots

REGISTRATION WORKFLOW:
When a user wants to register for a tournament:
1. Ask for tournament preference (show available tournaments)
2. Collect team details (team name, player names, in-game IDs)
3. Confirm entry fee and tournament details
4. Generate payment QR code
5. After payment confirmation, book the slot automatically

Current tournament data:
{tournament_context}

RESPONSE FORMAT:
- Be conversational and helpful
- Always confirm details before processing payments
- Provide clear step-by-step guidance
- Use structured responses for complex actions

Context: {context}"""


def _dump(tournament: Tournament) -> dict:
    return TournamentResponse.model_validate(tournament).model_dump(mode="json")


def describe_tournaments(tournaments: List[Tournament]) -> str:
    """Plain-text snapshot embedded in the system prompt"""
    if not tournaments:
        return "No upcoming tournaments available."

    lines = ["Available upcoming tournaments:"]
    for t in tournaments:
        lines.append(
            f"- {t.title} (ID: {t.id})\n"
            f"  Entry Fee: ₹{t.entry_fee}\n"
            f"  Prize Pool: ₹{t.prize_pool}\n"
            f"  Max Players: {t.max_players}\n"
            f"  Current Players: {t.current_players}\n"
            f"  Start Date: {t.start_date.strftime('%d %b %Y')}\n"
            f"  Type: {t.tournament_type.value}\n"
        )
    return "\n".join(lines)


class AssistantFunction:
    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    async def handle(self, request: AssistantRequest) -> dict:
        match request:
            case ListTournaments():
                return self.list_tournaments()
            case TournamentDetails(tournament_id=tournament_id):
                return self.tournament_details(tournament_id)
            case RegisterForTournament(tournament_id=tournament_id, team_details=team_details):
                return self.register(tournament_id, team_details)
            case Chat(message=message, context=context):
                return await self.chat(message, context)

        raise TypeError(f"Unhandled assistant request: {request!r}")

    # ══════════════════════════════════════════════════════════
    # ACTIONS
    # ══════════════════════════════════════════════════════════

    def list_tournaments(self) -> dict:
        tournaments = self.db.query(Tournament).order_by(Tournament.start_date.asc()).all()
        return {
            "action": "tournament_list",
            "tournaments": [_dump(t) for t in tournaments],
        }

    def tournament_details(self, tournament_id: UUID) -> dict:
        tournament = RegistrationService(self.db, self.ctx).get_tournament(tournament_id)
        return {
            "action": "tournament_details",
            "tournament": _dump(tournament),
        }

    def register(self, tournament_id: UUID, team_details: TeamDetails) -> dict:
        """Pending registration plus the UPI payment request for its entry fee"""
        try:
            registration, tournament = RegistrationService(self.db, self.ctx).create_pending(
                tournament_id, team_details
            )
        except AppError as e:
            raise type(e)(f"Registration failed: {e.detail}") from e

        upi_string = registration_upi_string(tournament)
        message = f"Registration created! Please complete payment of ₹{tournament.entry_fee} using the QR code."

        return {
            "action": "registration_created",
            "response": message,
            "registration": RegistrationResponse.model_validate(registration).model_dump(mode="json"),
            "tournament": _dump(tournament),
            "paymentQR": qr_code_url(upi_string),
            "upiString": upi_string,
        }

    async def chat(self, message: str, context: Optional[str] = None) -> dict:
        snapshot = self.db.query(Tournament).filter(
            Tournament.status == TournamentStatus.UPCOMING
        ).order_by(Tournament.start_date.asc()).limit(settings.ASSISTANT_SNAPSHOT_LIMIT).all()

        system_prompt = SYSTEM_PROMPT.format(
            tournament_context=describe_tournaments(snapshot),
            context=context or DEFAULT_CONTEXT,
        )
        reply = await GeminiClient.generate(system_prompt, message)

        return {
            "response": reply,
            "tournaments": [_dump(t) for t in snapshot],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
