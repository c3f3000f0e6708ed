# app/api/chat.py
"""
Assistant chat API - the signed-in user's conversation with the tournament assistant
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from app.core.database import get_db
from app.core.context import SessionContext, get_current_context
from app.schemas.chat import (
    SendMessageRequest,
    SelectTournamentRequest,
    SelectTournamentResponse,
    AssistantMessageResponse,
    TranscriptResponse,
)
from app.services.assistant_service import AssistantService

router = APIRouter()


@router.get("/messages", response_model=TranscriptResponse, summary="Assistant transcript")
def get_messages(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    """Oldest first; a new conversation starts with the assistant's greeting"""
    messages = AssistantService(db, ctx).transcript()
    return TranscriptResponse(messages=messages, total=len(messages))


@router.post("/messages", response_model=TranscriptResponse, summary="Send a message")
async def send_message(
    data: SendMessageRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    """
    Returns the messages this turn added: the user's message, the reply and
    any tournament list or payment request. On failure the user's message
    stays in the transcript and the error is returned.
    """
    added = await AssistantService(db, ctx).send(data)
    return TranscriptResponse(messages=added, total=len(added))


@router.post(
    "/messages/{message_id}/select",
    response_model=SelectTournamentResponse,
    summary="Pick a tournament from a list message",
)
def select_tournament(
    message_id: UUID,
    data: SelectTournamentRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    text = AssistantService(db, ctx).select_tournament(message_id, data.tournament_id)
    return SelectTournamentResponse(input=text)


@router.post(
    "/messages/{message_id}/paid",
    response_model=AssistantMessageResponse,
    summary="I've Paid",
)
def confirm_paid(
    message_id: UUID,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    """Confirms the payment message's registration without any verification"""
    return AssistantService(db, ctx).confirm_paid(message_id)
