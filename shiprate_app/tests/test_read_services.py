"""Tests for search, my-ratings, dashboard and suggestions."""

from __future__ import annotations

from datetime import date

import pytest

from shiprate_app.models import Rating
from shiprate_app.repositories.document_store import DocumentStore
from shiprate_app.repositories.rating_repository import ratings_collection
from shiprate_app.repositories.user_repository import SuggestionRepository
from shiprate_app.services.dashboard_service import DashboardService
from shiprate_app.services.errors import InvalidArgument, Unauthenticated
from shiprate_app.services.my_ratings_service import MyRatingsService, rating_belongs_to
from shiprate_app.services.rating_service import RatingService
from shiprate_app.services.ship_search_service import ShipSearchService
from shiprate_app.services.suggestion_service import SuggestionService


@pytest.fixture
def rated_fleet(db_session, pilot, submission):
    """Three ratings on two ships, two of them by the pilot fixture."""
    svc = RatingService(db_session)
    first = svc.submit_rating(**submission)
    second = svc.submit_rating(
        **{
            **submission,
            "ship_name": "Atlantic Star",
            "ship_code": "",
            "disembarkation_date": date(2024, 6, 1),
            "raw_info": {"sink": False},
        }
    )
    other = svc.submit_rating(
        **{
            **submission,
            "evaluator_id": "pilot-2",
            "evaluator_display_name": "Other",
            "disembarkation_date": date(2024, 7, 1),
            "raw_info": None,
        }
    )
    return first, second, other


class TestShipSearchService:
    def test_labels(self, db_session, rated_fleet):
        labels = ShipSearchService(db_session).list_ship_labels()
        assert labels == ["9585285", "Atlantic Star", "MSC Divina"]

    def test_search_by_name_and_code(self, db_session, rated_fleet):
        svc = ShipSearchService(db_session)
        assert [s.name for s in svc.search_ships("divina")] == ["MSC Divina"]
        assert [s.name for s in svc.search_ships("9585")] == ["MSC Divina"]
        assert len(svc.search_ships("a")) == 2
        assert svc.search_ships("  ") == []

    def test_ratings_newest_first(self, db_session, rated_fleet):
        first, _, other = rated_fleet
        ratings = ShipSearchService(db_session).list_ratings(first.ship_id)
        assert [r.id for r in ratings] == [other.rating_id, first.rating_id]

    def test_amenities_from_ship(self, db_session, rated_fleet):
        first, _, _ = rated_fleet
        svc = ShipSearchService(db_session)
        ship = svc.get_ship(first.ship_id)
        amenities = svc.resolve_amenities(ship, svc.list_ratings(first.ship_id))
        assert amenities == {"minibar": True, "sink": None, "microwave": None}

    def test_amenities_fall_back_to_newest_rating(self, db_session):
        store = DocumentStore(db_session)
        ship_doc = store.add("ships", {"name": "Old", "code": None, "info": {}, "averages": {}})
        store.add(
            ratings_collection(ship_doc.id),
            {"dataDesembarque": "2020-01-01", "infoPassadico": {}, "infoNavio": {"pia": True}},
        )
        store.add(
            ratings_collection(ship_doc.id),
            {"dataDesembarque": "2021-01-01", "infoNavio": {"frigobar": True, "pia": False}},
        )
        svc = ShipSearchService(db_session)
        ship = svc.get_ship(ship_doc.id)
        amenities = svc.resolve_amenities(ship, svc.list_ratings(ship_doc.id))
        assert amenities == {"minibar": True, "sink": False, "microwave": None}

    def test_amenities_prefer_bridge_section_of_newest_rating(self, db_session):
        store = DocumentStore(db_session)
        ship_doc = store.add("ships", {"name": "Old", "info": {}})
        store.add(
            ratings_collection(ship_doc.id),
            {
                "dataDesembarque": "2022-01-01",
                "infoPassadico": {"microondas": True},
                "infoNavio": {"frigobar": False},
            },
        )
        svc = ShipSearchService(db_session)
        ship = svc.get_ship(ship_doc.id)
        amenities = svc.resolve_amenities(ship, svc.list_ratings(ship_doc.id))
        assert amenities == {"minibar": None, "sink": None, "microwave": True}

    def test_get_missing_ship(self, db_session):
        assert ShipSearchService(db_session).get_ship("nope") is None


class TestMyRatingsService:
    def test_lists_only_own_ratings(self, db_session, rated_fleet):
        first, second, _ = rated_fleet
        entries = MyRatingsService(db_session).list_user_ratings("pilot-1")
        assert {e.rating.id for e in entries} == {first.rating_id, second.rating_id}

    def test_requires_identity(self, db_session):
        with pytest.raises(Unauthenticated):
            MyRatingsService(db_session).list_user_ratings(None)

    def test_legacy_rating_matches_display_name(self):
        legacy = Rating(evaluator_id=None, evaluator_display_name="Cmdt. Silva")
        assert rating_belongs_to(legacy, "pilot-1", "Cmdt. Silva")
        assert not rating_belongs_to(legacy, "pilot-1", None)
        owned = Rating(evaluator_id="pilot-2", evaluator_display_name="Cmdt. Silva")
        assert not rating_belongs_to(owned, "pilot-1", "Cmdt. Silva")

    def test_rating_average(self, db_session, rated_fleet):
        entry = MyRatingsService(db_session).list_user_ratings("pilot-1")[0]
        assert MyRatingsService.rating_average(entry.rating) == pytest.approx(27.5 / 7)


class TestDashboardService:
    def test_totals(self, db_session, rated_fleet):
        data = DashboardService(db_session).load("pilot-1")
        assert data.total_ships == 2
        assert data.total_ratings == 3
        assert data.user_ratings == 2
        assert len(data.recent_ratings) == 2
        assert {r.ship_name for r in data.recent_ratings} == {"MSC Divina", "Atlantic Star"}

    def test_recent_is_limited_to_three(self, db_session, pilot, submission):
        svc = RatingService(db_session)
        for _ in range(5):
            svc.submit_rating(**submission)
        data = DashboardService(db_session).load("pilot-1")
        assert data.user_ratings == 5
        assert len(data.recent_ratings) == 3

    def test_anonymous_gets_empty_dashboard(self, db_session, rated_fleet):
        data = DashboardService(db_session).load(None)
        assert data.total_ships == 0
        assert data.recent_ratings == []


class TestSuggestionService:
    def test_send(self, db_session):
        suggestion = SuggestionService(db_session).send(" a@b.c ", "Idea", " Faster search ")
        assert suggestion.id is not None
        assert suggestion.message == "Faster search"
        assert SuggestionRepository(db_session).count() == 1

    def test_empty_message(self, db_session):
        with pytest.raises(InvalidArgument):
            SuggestionService(db_session).send("a@b.c", "Idea", "   ")
