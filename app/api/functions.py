# app/api/functions.py
"""
Remote functions: the tournament assistant and payment confirmation.

Both answer failures with their own JSON bodies instead of ``{"detail"}``:
``{"error"}`` for the assistant, ``{"success": false, "error"}`` for
payment confirmation.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.context import SessionContext, get_session_context
from app.core.errors import AppError
from app.schemas.chat import AssistantFunctionPayload, ConfirmPaymentRequest
from app.schemas.tournament import RegistrationResponse, TournamentResponse
from app.services.assistant_function import AssistantFunction
from app.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/tournament-ai-assistant", summary="Tournament AI assistant")
async def tournament_ai_assistant(
    payload: AssistantFunctionPayload,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """
    Actions: list, details, register (pending registration plus UPI payment
    request) and chat (default, forwarded to the AI model).
    """
    try:
        request = payload.to_request()
        return await AssistantFunction(db, ctx).handle(request)
    except AppError as e:
        logger.warning(f"Assistant function failed ({e.status_code}): {e.detail}")
        return JSONResponse(status_code=e.status_code, content={"error": e.detail})


@router.post("/confirm-payment", summary="Confirm a registration payment")
def confirm_payment(
    payload: ConfirmPaymentRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Marks a pending registration paid and takes a slot; the proof is only logged"""
    try:
        registration, tournament = RegistrationService(db, ctx).confirm_payment(
            payload.registration_id,
            payload.tournament_id,
            payload.payment_proof,
        )
    except AppError as e:
        logger.warning(f"Payment confirmation failed ({e.status_code}): {e.detail}")
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.detail},
        )

    return {
        "success": True,
        "message": "Payment confirmed and slot booked successfully!",
        "registration": RegistrationResponse.model_validate(registration).model_dump(mode="json"),
        "tournament": TournamentResponse.model_validate(tournament).model_dump(mode="json"),
    }
