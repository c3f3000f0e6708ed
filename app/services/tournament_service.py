import logging
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.context import SessionContext
from app.core.errors import ValidationFailed
from app.models.tournaments import Tournament, TournamentStatus
from app.schemas.tournament import TournamentCreate, TournamentDetailResponse
from app.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    def create_tournament(self, data: TournamentCreate) -> Tournament:
        """
        New upcoming tournament owned by the calling organizer.
        Past start dates are accepted.
        """
        organizer = self.ctx.require_organizer()

        if data.start_date is None:
            raise ValidationFailed("Please select a start date")

        tournament = Tournament(
            title=data.title.strip(),
            description=data.description,
            entry_fee=data.entry_fee,
            prize_pool=data.prize_pool,
            max_players=data.max_players,
            current_players=0,
            tournament_type=data.tournament_type,
            map=data.map,
            rules=data.rules,
            start_date=data.start_date,
            status=TournamentStatus.UPCOMING,
            organizer_id=organizer.id,
        )

        self.db.add(tournament)
        self.db.commit()
        self.db.refresh(tournament)

        logger.info(f"Tournament created: {tournament.title} by {organizer.username}")
        return tournament

    def details(self, tournament_id: UUID) -> TournamentDetailResponse:
        registrations = RegistrationService(self.db, self.ctx)
        tournament = registrations.get_tournament(tournament_id)

        registration = None
        if self.ctx.is_authenticated:
            registration = registrations.find_live_registration(tournament.id, self.ctx.profile.id)

        response = TournamentDetailResponse.model_validate(tournament)
        response.is_registered = registration is not None
        response.payment_status = registration.payment_status if registration else None
        return response
