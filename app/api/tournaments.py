# app/api/tournaments.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.core.database import get_db
from app.core.context import (
    SessionContext,
    get_session_context,
    get_organizer_context,
)
from app.schemas.tournament import (
    SortKey,
    StatusFilter,
    TournamentCreate,
    TournamentResponse,
    TournamentDetailResponse,
    DashboardResponse,
    JoinTournamentResponse,
)
from app.services.dashboard_service import DashboardService
from app.services.tournament_service import TournamentService

router = APIRouter()


# ==================== LIST & GET ====================

@router.get("/", response_model=List[TournamentResponse], summary="Tournament list")
def get_tournaments(
    search: str = Query("", max_length=100),
    sort: SortKey = SortKey.START_DATE,
    status_filter: StatusFilter = Query(StatusFilter.ALL, alias="status"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """
    Search, filter and sort tournaments.

    - **search**: case-insensitive match on title or description
    - **sort**: start_date and entry_fee ascending, prize_pool descending
    - **status**: all, upcoming, active or completed
    """
    return DashboardService(db, ctx).list_tournaments(search, sort, status_filter)


@router.get("/dashboard", response_model=DashboardResponse, summary="Dashboard tabs and stats")
def get_dashboard(
    search: str = Query("", max_length=100),
    sort: SortKey = SortKey.START_DATE,
    status_filter: StatusFilter = Query(StatusFilter.ALL, alias="status"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return DashboardService(db, ctx).dashboard(search, sort, status_filter)


@router.get("/registered", response_model=List[UUID], summary="Tournaments I'm registered for")
def get_registered_tournament_ids(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """Ids with a completed registration; empty for anonymous callers"""
    return DashboardService(db, ctx).registered_tournament_ids()


@router.get("/{tournament_id}", response_model=TournamentDetailResponse, summary="Tournament details")
def get_tournament(
    tournament_id: UUID,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return TournamentService(db, ctx).details(tournament_id)


# ==================== CREATE ====================

@router.post(
    "/",
    response_model=TournamentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tournament",
)
def create_tournament(
    data: TournamentCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_organizer_context),
):
    """Organizers only"""
    return TournamentService(db, ctx).create_tournament(data)


# ==================== JOIN ====================

@router.post("/{tournament_id}/join", response_model=JoinTournamentResponse, summary="Join a tournament")
def join_tournament(
    tournament_id: UUID,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    """
    Registers the caller with payment marked completed (payment is simulated)
    and takes one slot.
    """
    return DashboardService(db, ctx).join_tournament(tournament_id)
