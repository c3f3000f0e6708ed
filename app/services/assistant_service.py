import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.context import SessionContext
from app.core.errors import NotFound, ValidationFailed
from app.models.chat import AssistantMessage, AssistantMessageKind
from app.models.tournaments import Registration
from app.schemas.chat import AssistantFunctionPayload, SendMessageRequest
from app.services.assistant_function import AssistantFunction
from app.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

ASSISTANT_CONTEXT = "BGMI Tournament Platform - AI assistant with full registration and payment capabilities"

GREETING = (
    "Hi! I'm your BGMI tournament assistant with full platform access. I can help you:\n\n"
    "🏆 **View tournaments** - Check available tournaments\n"
    "💳 **Register for tournaments** - Complete registration with payment\n"
    "📱 **Generate payment QR** - Get UPI payment codes instantly\n"
    "🎯 **Book slots automatically** - Confirm your tournament spot\n\n"
    "What would you like to do today? Ask me to show tournaments, help you register, "
    "or ask any questions!"
)


class AssistantService:
    """The signed-in user's assistant conversation"""

    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    # ══════════════════════════════════════════════════════════
    # TRANSCRIPT
    # ══════════════════════════════════════════════════════════

    def transcript(self) -> List[AssistantMessage]:
        profile = self.ctx.require_user()
        messages = self.db.query(AssistantMessage).filter(
            AssistantMessage.user_id == profile.id
        ).order_by(AssistantMessage.position.asc()).all()

        if not messages:
            messages = [self._append(GREETING)]
        return messages

    def _append(
        self,
        content: str,
        is_user: bool = False,
        kind: AssistantMessageKind = AssistantMessageKind.TEXT,
        data: Optional[dict] = None,
    ) -> AssistantMessage:
        user_id = self.ctx.profile.id
        last = self.db.query(func.max(AssistantMessage.position)).filter(
            AssistantMessage.user_id == user_id
        ).scalar()

        message = AssistantMessage(
            user_id=user_id,
            is_user=is_user,
            kind=kind,
            content=content,
            data=data,
            position=(last or 0) + 1,
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def _get_message(self, message_id: UUID, kind: AssistantMessageKind) -> AssistantMessage:
        profile = self.ctx.require_user()
        message = self.db.query(AssistantMessage).filter(
            AssistantMessage.id == message_id,
            AssistantMessage.user_id == profile.id,
        ).first()
        if message is None or message.kind != kind:
            raise NotFound("Message not found")
        return message

    # ══════════════════════════════════════════════════════════
    # ACTIONS
    # ══════════════════════════════════════════════════════════

    async def send(self, data: SendMessageRequest) -> List[AssistantMessage]:
        """
        Append the user's message, call the assistant function and append
        what it returned. Returns the messages added by this turn.
        """
        profile = self.ctx.require_user()
        added = [self._append(data.message, is_user=True)]

        payload = AssistantFunctionPayload(
            message=data.message,
            context=ASSISTANT_CONTEXT,
            user_id=profile.id,
            action=data.action,
            tournament_id=data.tournament_id,
            team_details=data.team_details,
        )
        result = await AssistantFunction(self.db, self.ctx).handle(payload.to_request())

        reply = result.get("response")
        if reply:
            added.append(self._append(reply))

        tournaments = result.get("tournaments")
        if not tournaments and result.get("action") == "tournament_details":
            tournaments = [result["tournament"]]
        if tournaments:
            added.append(self._append(
                "Available Tournaments",
                kind=AssistantMessageKind.TOURNAMENT_INFO,
                data={"tournaments": tournaments},
            ))

        if result.get("action") == "registration_created" and result.get("paymentQR"):
            tournament = result["tournament"]
            added.append(self._append(
                f"Payment Required for {tournament['title']}",
                kind=AssistantMessageKind.PAYMENT_QR,
                data={
                    "tournament": tournament,
                    "paymentQR": result["paymentQR"],
                    "upiString": result["upiString"],
                    "registration": result["registration"],
                },
            ))

        return added

    def select_tournament(self, message_id: UUID, tournament_id: UUID) -> str:
        """Registration-intent sentence for the input box; changes nothing"""
        message = self._get_message(message_id, AssistantMessageKind.TOURNAMENT_INFO)

        for tournament in (message.data or {}).get("tournaments", []):
            if tournament.get("id") == str(tournament_id):
                return (
                    f'I want to register for "{tournament["title"]}" tournament. '
                    f"The entry fee is ₹{tournament['entry_fee']}."
                )

        raise NotFound("Tournament is not part of this message")

    def confirm_paid(self, message_id: UUID) -> AssistantMessage:
        """
        "I've Paid" on a payment message: marks the registration completed and
        takes a slot locally. Nothing verifies that a payment happened.
        """
        message = self._get_message(message_id, AssistantMessageKind.PAYMENT_QR)
        registration_id = ((message.data or {}).get("registration") or {}).get("id")
        if registration_id is None:
            raise ValidationFailed("Payment message has no registration")

        registration = self.db.query(Registration).filter(
            Registration.id == UUID(registration_id),
            Registration.user_id == self.ctx.profile.id,
        ).first()
        if registration is None:
            raise NotFound("Registration not found")

        _, tournament = RegistrationService(self.db, self.ctx).complete(registration)
        logger.info(f"Optimistic payment confirmation for registration {registration.id}")

        return self._append(
            f'🎉 Registration successful! You\'ve been registered for "{tournament.title}". '
            f"Your slot is confirmed!",
            kind=AssistantMessageKind.REGISTRATION_SUCCESS,
        )
