import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Enum, Uuid, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base, enum_values


class UserType(str, enum.Enum):
    ORGANIZER = "organizer"  # may create tournaments
    TEAM = "team"


class User(Base):
    """Auth identity; the public side lives in Profile"""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # empty for OAuth-only accounts
    oauth_provider = Column(String(30), nullable=True)
    oauth_subject = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_users_oauth", "oauth_provider", "oauth_subject", unique=True),
    )

    def __repr__(self):
        return f"<User {self.email}>"


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the owning user
    id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    # ══════════════════════════════════════════════════════════
    # IDENTITY
    # ══════════════════════════════════════════════════════════
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False)
    in_game_name = Column(String(50), nullable=False)
    avatar_url = Column(String(500), nullable=True)

    # ══════════════════════════════════════════════════════════
    # ROLE
    # ══════════════════════════════════════════════════════════
    user_type = Column(
        Enum(UserType, values_callable=enum_values, name="user_type"),
        default=UserType.TEAM,
        nullable=False,
    )
    organizer_code = Column(String(4), unique=True, nullable=True)  # organizers only
    linked_organizer_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    # ══════════════════════════════════════════════════════════
    # STATS
    # ══════════════════════════════════════════════════════════
    level = Column(Integer, default=1, nullable=False)
    wins = Column(Integer, default=0, nullable=False)
    total_matches = Column(Integer, default=0, nullable=False)
    earnings = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="profile")
    linked_organizer = relationship("Profile", remote_side=[id])
    tournaments = relationship("Tournament", back_populates="organizer")
    registrations = relationship("Registration", back_populates="user")

    @property
    def is_organizer(self) -> bool:
        return self.user_type == UserType.ORGANIZER

    @property
    def win_rate(self) -> float:
        """Win rate in percent"""
        if self.total_matches == 0:
            return 0.0
        return round((self.wins / self.total_matches) * 100, 2)

    def __repr__(self):
        return f"<Profile {self.username}>"


class AuthSession(Base):
    """Persisted sign-in session; tokens carry its id as ``sid``"""
    __tablename__ = "auth_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String(30), default="password", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_refreshed_at = Column(DateTime(timezone=True), nullable=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="sessions")

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None

    def __repr__(self):
        return f"<AuthSession {self.id} user={self.user_id}>"
