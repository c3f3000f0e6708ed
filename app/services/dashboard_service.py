from typing import Iterable, List, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.context import SessionContext
from app.models.tournaments import Tournament, Registration, TournamentStatus, PaymentStatus
from app.schemas.tournament import (
    SortKey,
    StatusFilter,
    TournamentResponse,
    DashboardResponse,
    DashboardStats,
    JoinTournamentResponse,
    RegistrationResponse,
)
from app.services.registration_service import RegistrationService


def filter_and_sort(
    tournaments: Sequence,
    search_term: str = "",
    sort_key: SortKey = SortKey.START_DATE,
    status_filter: StatusFilter = StatusFilter.ALL,
) -> list:
    """
    Search, status filter and sort over already-fetched tournaments.

    Search is a case-insensitive substring match on title or description.
    start_date and entry_fee sort ascending, prize_pool descending. The sort
    is stable, so ties keep the fetch order.
    """
    needle = (search_term or "").strip().lower()

    def matches(t) -> bool:
        if needle:
            in_title = needle in (t.title or "").lower()
            in_description = needle in (t.description or "").lower()
            if not (in_title or in_description):
                return False
        if status_filter != StatusFilter.ALL:
            return _status_value(t.status) == status_filter.value
        return True

    selected = [t for t in tournaments if matches(t)]

    if sort_key == SortKey.START_DATE:
        return sorted(selected, key=lambda t: t.start_date)
    if sort_key == SortKey.ENTRY_FEE:
        return sorted(selected, key=lambda t: t.entry_fee)
    # prize_pool: descending via a negated key
    return sorted(selected, key=lambda t: -t.prize_pool)


def _status_value(status) -> str:
    return status.value if isinstance(status, TournamentStatus) else str(status)


class DashboardService:
    """Tournament browsing and joining for one caller"""

    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    def fetch_tournaments(self) -> List[Tournament]:
        """All tournaments, newest first"""
        return self.db.query(Tournament).order_by(
            Tournament.created_at.desc(),
            Tournament.id,
        ).all()

    def registered_tournament_ids(self) -> List[UUID]:
        """Tournaments the caller holds a completed registration for (empty when anonymous)"""
        if not self.ctx.is_authenticated:
            return []

        rows = self.db.query(Registration.tournament_id).filter(
            Registration.user_id == self.ctx.profile.id,
            Registration.payment_status == PaymentStatus.COMPLETED,
        ).all()
        return [row[0] for row in rows]

    def list_tournaments(
        self,
        search_term: str = "",
        sort_key: SortKey = SortKey.START_DATE,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> List[Tournament]:
        return filter_and_sort(self.fetch_tournaments(), search_term, sort_key, status_filter)

    def dashboard(
        self,
        search_term: str = "",
        sort_key: SortKey = SortKey.START_DATE,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> DashboardResponse:
        tournaments = self.fetch_tournaments()
        registered = self.registered_tournament_ids()
        registered_set = set(registered)

        listed = filter_and_sort(tournaments, search_term, sort_key, status_filter)

        return DashboardResponse(
            all=_responses(listed),
            upcoming=_responses(t for t in listed if t.status == TournamentStatus.UPCOMING),
            active=_responses(t for t in listed if t.status == TournamentStatus.ACTIVE),
            my=_responses(t for t in listed if t.id in registered_set),
            stats=DashboardStats(
                total=len(tournaments),
                upcoming=sum(1 for t in tournaments if t.status == TournamentStatus.UPCOMING),
                active=sum(1 for t in tournaments if t.status == TournamentStatus.ACTIVE),
                registered=len(registered),
            ),
            registered_tournament_ids=registered,
        )

    def join_tournament(self, tournament_id: UUID) -> JoinTournamentResponse:
        registration, tournament = RegistrationService(self.db, self.ctx).join(tournament_id)

        return JoinTournamentResponse(
            message="You've successfully joined the tournament!",
            registration=RegistrationResponse.model_validate(registration),
            tournament=TournamentResponse.model_validate(tournament),
            registered_tournament_ids=self.registered_tournament_ids(),
        )


def _responses(tournaments: Iterable[Tournament]) -> List[TournamentResponse]:
    return [TournamentResponse.model_validate(t) for t in tournaments]
