"""
Registration writes.

Every path that completes a registration (dashboard join, payment
confirmation, the assistant's "I've Paid") runs through ``_claim_slot`` in
the same transaction as the registration write. The slot is taken with a
conditional UPDATE (``current_players < max_players``), and the partial
unique index on (tournament_id, user_id) rejects a second live
registration, so concurrent joins can neither over-fill a tournament nor
duplicate a registration.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.context import SessionContext
from app.core.errors import (
    AppError,
    AccessDenied,
    CapacityError,
    DuplicateRegistration,
    NotFound,
    RegistrationStateError,
    ValidationFailed,
)
from app.models.tournaments import Tournament, Registration, PaymentStatus
from app.schemas.chat import TeamDetails

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    # ══════════════════════════════════════════════════════════
    # LOOKUPS
    # ══════════════════════════════════════════════════════════

    def get_tournament(self, tournament_id: UUID) -> Tournament:
        tournament = self.db.query(Tournament).filter(Tournament.id == tournament_id).first()
        if tournament is None:
            raise NotFound("Tournament not found")
        return tournament

    def find_live_registration(self, tournament_id: UUID, user_id: UUID) -> Optional[Registration]:
        return self.db.query(Registration).filter(
            Registration.tournament_id == tournament_id,
            Registration.user_id == user_id,
            Registration.payment_status != PaymentStatus.FAILED,
        ).first()

    # ══════════════════════════════════════════════════════════
    # WRITES
    # ══════════════════════════════════════════════════════════

    def join(self, tournament_id: UUID) -> Tuple[Registration, Tournament]:
        """Register the caller with payment marked completed (payment is simulated)"""
        profile = self.ctx.require_user("Please sign in to join tournaments")
        tournament = self.get_tournament(tournament_id)

        if tournament.is_full:
            raise CapacityError()
        if self.find_live_registration(tournament.id, profile.id):
            raise DuplicateRegistration("You are already registered for this tournament")

        registration = Registration(
            tournament_id=tournament.id,
            user_id=profile.id,
            payment_status=PaymentStatus.COMPLETED,
            registered_at=datetime.now(timezone.utc),
        )

        try:
            self.db.add(registration)
            self.db.flush()
            self._claim_slot(tournament.id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateRegistration("You are already registered for this tournament")
        except AppError:
            self.db.rollback()
            raise

        self.db.refresh(registration)
        self.db.refresh(tournament)
        logger.info(f"{profile.username} joined {tournament.title} ({tournament.current_players}/{tournament.max_players})")
        return registration, tournament

    def create_pending(self, tournament_id: UUID, team_details: TeamDetails) -> Tuple[Registration, Tournament]:
        """Pending registration awaiting payment; no slot is taken yet"""
        profile = self.ctx.require_user("Please sign in to register for tournaments")
        tournament = self.get_tournament(tournament_id)

        if tournament.is_full:
            raise CapacityError()
        if self.find_live_registration(tournament.id, profile.id):
            raise DuplicateRegistration()

        registration = Registration(
            tournament_id=tournament.id,
            user_id=profile.id,
            team_name=team_details.team_name,
            team_members=list(team_details.team_members),
            payment_status=PaymentStatus.PENDING,
            registered_at=datetime.now(timezone.utc),
        )

        try:
            self.db.add(registration)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateRegistration()

        self.db.refresh(registration)
        logger.info(f"Pending registration {registration.id} for {tournament.title}")
        return registration, tournament

    def complete(self, registration: Registration, restamp: bool = False) -> Tuple[Registration, Tournament]:
        """
        pending -> completed and take a slot, atomically.

        Args:
            registration: a pending registration
            restamp: also move registered_at to the confirmation time

        Raises:
            RegistrationStateError: the registration is no longer pending
            CapacityError: the tournament filled up meanwhile
        """
        values = {Registration.payment_status: PaymentStatus.COMPLETED}
        if restamp:
            values[Registration.registered_at] = datetime.now(timezone.utc)

        try:
            updated = self.db.query(Registration).filter(
                Registration.id == registration.id,
                Registration.payment_status == PaymentStatus.PENDING,
            ).update(values, synchronize_session=False)
            if not updated:
                raise RegistrationStateError()

            self._claim_slot(registration.tournament_id)
            self.db.commit()
        except AppError:
            self.db.rollback()
            raise

        self.db.refresh(registration)
        tournament = self.get_tournament(registration.tournament_id)
        self.db.refresh(tournament)
        return registration, tournament

    def confirm_payment(
        self,
        registration_id: Optional[UUID],
        tournament_id: Optional[UUID],
        payment_proof: Optional[str] = None,
    ) -> Tuple[Registration, Tournament]:
        """Payment confirmation function; any call counts as paid"""
        profile = self.ctx.require_user()

        if not registration_id or not tournament_id:
            raise ValidationFailed("Registration ID and Tournament ID are required")

        registration = self.db.query(Registration).filter(Registration.id == registration_id).first()
        if registration is None:
            raise NotFound("Registration not found")
        if registration.user_id != profile.id:
            raise AccessDenied("This registration belongs to another user")
        if registration.tournament_id != tournament_id:
            raise ValidationFailed("Registration does not belong to this tournament")

        tournament = self.get_tournament(tournament_id)
        if tournament.is_full:
            raise CapacityError()

        registration, tournament = self.complete(registration, restamp=True)

        logger.info(f"Payment confirmed for registration {registration.id}, tournament {tournament.id}")
        if payment_proof:
            logger.info(f"Payment proof: {payment_proof}")
        return registration, tournament

    def _claim_slot(self, tournament_id: UUID) -> None:
        taken = self.db.query(Tournament).filter(
            Tournament.id == tournament_id,
            Tournament.current_players < Tournament.max_players,
        ).update(
            {Tournament.current_players: Tournament.current_players + 1},
            synchronize_session=False,
        )
        if not taken:
            raise CapacityError()
