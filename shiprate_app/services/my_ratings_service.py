"""
The ratings written by one pilot, across all ships.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from shiprate_app.models import Rating, Ship
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.ship_repository import ShipRepository
from shiprate_app.repositories.user_repository import UserRepository
from shiprate_app.services.errors import Unauthenticated

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(slots=True)
class UserRatingEntry:
    ship: Ship
    rating: Rating


def rating_belongs_to(rating: Rating, evaluator_id: str, display_name: Optional[str]) -> bool:
    """Match on author id; legacy ratings without an id match on the name snapshot."""
    if rating.evaluator_id:
        return rating.evaluator_id == evaluator_id
    return bool(display_name) and rating.evaluator_display_name == display_name


def collect_user_ratings(
    ship_repo: ShipRepository,
    rating_repo: RatingRepository,
    evaluator_id: str,
    display_name: Optional[str],
) -> tuple[List[UserRatingEntry], int]:
    """User's entries, newest submission first, plus the total rating count seen."""
    entries: List[UserRatingEntry] = []
    total = 0
    for ship in ship_repo.list():
        ratings = rating_repo.list_for_ship(ship.id)
        total += len(ratings)
        for rating in ratings:
            if rating_belongs_to(rating, evaluator_id, display_name):
                entries.append(UserRatingEntry(ship=ship, rating=rating))
    entries.sort(key=lambda e: e.rating.submitted_at or _EPOCH, reverse=True)
    return entries, total


class MyRatingsService:
    def __init__(self, db: Session) -> None:
        self._ship_repo = ShipRepository(db)
        self._rating_repo = RatingRepository(db)
        self._user_repo = UserRepository(db)

    def list_user_ratings(self, evaluator_id: Optional[str]) -> List[UserRatingEntry]:
        if not evaluator_id:
            raise Unauthenticated()
        profile = self._user_repo.get(evaluator_id)
        display_name = profile.display_name if profile else None
        entries, _ = collect_user_ratings(
            self._ship_repo, self._rating_repo, evaluator_id, display_name
        )
        return entries

    @staticmethod
    def rating_average(rating: Rating) -> float:
        return rating.average_score
