from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from enum import Enum
from typing import Optional, List
from app.models.tournaments import TournamentStatus, TournamentType, PaymentStatus


class SortKey(str, Enum):
    START_DATE = "start_date"  # ascending
    PRIZE_POOL = "prize_pool"  # descending
    ENTRY_FEE = "entry_fee"  # ascending


class StatusFilter(str, Enum):
    ALL = "all"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


# ==================== TOURNAMENT ====================

class TournamentCreate(BaseModel):
    """Create a tournament (organizers only)"""
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    entry_fee: int = Field(0, ge=0)
    prize_pool: int = Field(0, ge=0)
    max_players: int = Field(..., ge=2, le=100)
    tournament_type: TournamentType = TournamentType.SQUAD
    map: Optional[str] = Field("Erangel", max_length=50)
    rules: Optional[str] = Field(None, max_length=5000)
    # Optional here so a missing date is reported by the service, not the parser
    start_date: Optional[datetime] = None


class TournamentResponse(BaseModel):
    """Tournament response"""
    id: UUID
    title: str
    description: Optional[str] = None
    entry_fee: int
    prize_pool: int
    max_players: int
    current_players: int
    start_date: datetime
    status: TournamentStatus
    organizer_id: UUID
    tournament_type: TournamentType
    map: Optional[str] = None
    rules: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TournamentDetailResponse(TournamentResponse):
    """Tournament with the caller's registration state"""
    spots_left: int
    is_registered: bool = False
    payment_status: Optional[PaymentStatus] = None


class DashboardStats(BaseModel):
    total: int
    upcoming: int
    active: int
    registered: int


class DashboardResponse(BaseModel):
    """Per-status tabs of the filtered list plus overall stats"""
    all: List[TournamentResponse]
    upcoming: List[TournamentResponse]
    active: List[TournamentResponse]
    my: List[TournamentResponse]
    stats: DashboardStats
    registered_tournament_ids: List[UUID] = []


# ==================== REGISTRATION ====================

class RegistrationResponse(BaseModel):
    id: UUID
    tournament_id: UUID
    user_id: UUID
    team_name: Optional[str] = None
    team_members: Optional[List[str]] = None
    payment_status: PaymentStatus
    registered_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JoinTournamentResponse(BaseModel):
    """Join result with the re-fetched state"""
    message: str
    registration: RegistrationResponse
    tournament: TournamentResponse
    registered_tournament_ids: List[UUID]
