import uuid
import enum
from sqlalchemy import (
    Column, String, Integer, DateTime, ForeignKey, Enum, Text, JSON, Uuid,
    Index, CheckConstraint, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base, enum_values


class TournamentStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class TournamentType(str, enum.Enum):
    SOLO = "solo"
    DUO = "duo"
    SQUAD = "squad"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Money and capacity
    entry_fee = Column(Integer, default=0, nullable=False)
    prize_pool = Column(Integer, default=0, nullable=False)
    max_players = Column(Integer, default=100, nullable=False)
    current_players = Column(Integer, default=0, nullable=False)

    # Game settings
    tournament_type = Column(
        Enum(TournamentType, values_callable=enum_values, name="tournament_type"),
        default=TournamentType.SQUAD,
        nullable=False,
    )
    map = Column(String(50), nullable=True)
    rules = Column(Text, nullable=True)

    # Schedule and state (status is changed by hand, never automatically)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(TournamentStatus, values_callable=enum_values, name="tournament_status"),
        default=TournamentStatus.UPCOMING,
        nullable=False,
        index=True,
    )

    organizer_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    organizer = relationship("Profile", back_populates="tournaments")
    registrations = relationship("Registration", back_populates="tournament", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("entry_fee >= 0", name="ck_tournament_entry_fee"),
        CheckConstraint("prize_pool >= 0", name="ck_tournament_prize_pool"),
        CheckConstraint("max_players >= 2", name="ck_tournament_max_players"),
        CheckConstraint(
            "current_players >= 0 AND current_players <= max_players",
            name="ck_tournament_capacity",
        ),
        Index("ix_tournaments_status_start_date", "status", "start_date"),
    )

    @property
    def is_full(self) -> bool:
        return self.current_players >= self.max_players

    @property
    def spots_left(self) -> int:
        return max(self.max_players - self.current_players, 0)

    def __repr__(self):
        return f"<Tournament {self.title}>"


class Registration(Base):
    __tablename__ = "tournament_registrations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tournament_id = Column(Uuid(as_uuid=True), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    team_name = Column(String(100), nullable=True)
    team_members = Column(JSON, nullable=True)  # list of in-game names

    payment_status = Column(
        Enum(PaymentStatus, values_callable=enum_values, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    registered_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="registrations")
    user = relationship("Profile", back_populates="registrations")

    # One live (not failed) registration per user per tournament
    __table_args__ = (
        Index(
            "uq_registration_live",
            "tournament_id",
            "user_id",
            unique=True,
            postgresql_where=text("payment_status <> 'failed'"),
            sqlite_where=text("payment_status <> 'failed'"),
        ),
        Index("ix_registration_user_status", "user_id", "payment_status"),
    )

    def __repr__(self):
        return f"<Registration tournament={self.tournament_id} user={self.user_id} {self.payment_status}>"
