from datetime import datetime, timedelta
from types import SimpleNamespace

from app.models.tournaments import TournamentStatus
from app.schemas.tournament import SortKey, StatusFilter
from app.services.dashboard_service import filter_and_sort

BASE_DATE = datetime(2026, 1, 1, 18, 0)


def tournament(title, entry_fee=0, prize_pool=0, days=0, status=TournamentStatus.UPCOMING, description=None):
    return SimpleNamespace(
        title=title,
        description=description,
        entry_fee=entry_fee,
        prize_pool=prize_pool,
        start_date=BASE_DATE + timedelta(days=days),
        status=status,
    )


def titles(tournaments):
    return [t.title for t in tournaments]


class TestSorting:

    def test_entry_fee_ascending(self):
        fetched = [tournament("A", entry_fee=50), tournament("B", entry_fee=10), tournament("C", entry_fee=30)]
        result = filter_and_sort(fetched, sort_key=SortKey.ENTRY_FEE)
        assert [t.entry_fee for t in result] == [10, 30, 50]

    def test_prize_pool_descending(self):
        fetched = [tournament("A", prize_pool=100), tournament("B", prize_pool=500), tournament("C", prize_pool=200)]
        result = filter_and_sort(fetched, sort_key=SortKey.PRIZE_POOL)
        assert [t.prize_pool for t in result] == [500, 200, 100]

    def test_start_date_ascending_is_default(self):
        fetched = [tournament("Late", days=5), tournament("Early", days=1), tournament("Middle", days=3)]
        assert titles(filter_and_sort(fetched)) == ["Early", "Middle", "Late"]

    def test_ties_keep_fetch_order(self):
        fetched = [
            tournament("First", entry_fee=20, prize_pool=300),
            tournament("Second", entry_fee=10, prize_pool=300),
            tournament("Third", entry_fee=20, prize_pool=300),
        ]
        assert titles(filter_and_sort(fetched, sort_key=SortKey.ENTRY_FEE)) == ["Second", "First", "Third"]
        assert titles(filter_and_sort(fetched, sort_key=SortKey.PRIZE_POOL)) == ["First", "Second", "Third"]


class TestSearchAndFilter:

    def test_search_is_case_insensitive_substring(self):
        fetched = [tournament("Erangel Showdown"), tournament("Miramar Masters")]
        assert titles(filter_and_sort(fetched, search_term="eran")) == ["Erangel Showdown"]

    def test_search_matches_description(self):
        fetched = [tournament("Weekly Cup", description="Played on SANHOK"), tournament("Daily Cup")]
        assert titles(filter_and_sort(fetched, search_term="sanhok")) == ["Weekly Cup"]

    def test_blank_search_keeps_everything(self):
        fetched = [tournament("A"), tournament("B")]
        assert len(filter_and_sort(fetched, search_term="   ")) == 2

    def test_status_filter(self):
        fetched = [
            tournament("Open", status=TournamentStatus.UPCOMING),
            tournament("Live", status=TournamentStatus.ACTIVE),
            tournament("Done", status=TournamentStatus.COMPLETED),
        ]
        assert titles(filter_and_sort(fetched, status_filter=StatusFilter.ACTIVE)) == ["Live"]
        assert len(filter_and_sort(fetched, status_filter=StatusFilter.ALL)) == 3

    def test_search_and_status_combine(self):
        fetched = [
            tournament("Erangel Open", status=TournamentStatus.UPCOMING),
            tournament("Erangel Finals", status=TournamentStatus.COMPLETED),
        ]
        result = filter_and_sort(fetched, search_term="ERANGEL", status_filter=StatusFilter.COMPLETED)
        assert titles(result) == ["Erangel Finals"]
