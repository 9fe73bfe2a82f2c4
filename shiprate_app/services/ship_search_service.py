"""
Read-side queries for ship search, autocomplete and the ship detail view.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from shiprate_app.config.criteria import AMENITY_FIELDS
from shiprate_app.models import Rating, Ship, ShipInfo
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.ship_repository import ShipRepository

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def rating_sort_key(rating: Rating) -> tuple[date, datetime]:
    """Disembarkation date first, submission time to break ties or fill gaps."""
    submitted = rating.submitted_at or _EPOCH
    return (rating.disembarkation_date or submitted.date(), submitted)


class ShipSearchService:
    def __init__(self, db: Session) -> None:
        self._ship_repo = ShipRepository(db)
        self._rating_repo = RatingRepository(db)

    def list_ship_labels(self) -> List[str]:
        """Unique ship names and IMO codes, for autocomplete."""
        labels: set[str] = set()
        for ship in self._ship_repo.list():
            if ship.name:
                labels.add(ship.name)
            if ship.code:
                labels.add(ship.code)
        return sorted(labels, key=str.lower)

    def search_ships(self, term: str) -> List[Ship]:
        term = (term or "").strip().lower()
        if not term:
            return []
        return [
            ship
            for ship in self._ship_repo.list()
            if term in ship.name.lower() or (ship.code and term in ship.code.lower())
        ]

    def get_ship(self, ship_id: str) -> Optional[Ship]:
        return self._ship_repo.get(ship_id)

    def list_ratings(self, ship_id: str) -> List[Rating]:
        """Ratings of a ship, most recent disembarkation first."""
        ratings = self._rating_repo.list_for_ship(ship_id)
        ratings.sort(key=rating_sort_key, reverse=True)
        return ratings

    def resolve_amenities(self, ship: Ship, ratings: List[Rating]) -> Dict[str, bool | None]:
        """
        Amenities for display.

        Ships rated before amenities were merged into the ship record only
        have them on the ratings, so fall back to the newest rating: its
        bridge section first, then its ship info.
        """
        amenities = _amenities(ship.info)
        if _unknown(amenities) and ratings:
            newest = max(ratings, key=rating_sort_key)
            amenities = _amenities(newest.bridge_info)
            if _unknown(amenities):
                amenities = _amenities(newest.ship_info)
        return amenities


def _amenities(info: ShipInfo) -> Dict[str, bool | None]:
    return {name: getattr(info, name) for name in AMENITY_FIELDS}


def _unknown(amenities: Dict[str, bool | None]) -> bool:
    return all(v is None for v in amenities.values())
