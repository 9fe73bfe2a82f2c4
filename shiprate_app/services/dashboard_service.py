"""
Home screen statistics: totals and the pilot's latest ratings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from shiprate_app.config.criteria import RECENT_RATINGS_LIMIT
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.ship_repository import ShipRepository
from shiprate_app.repositories.user_repository import UserRepository
from shiprate_app.services.my_ratings_service import collect_user_ratings


@dataclass(slots=True)
class RecentRating:
    ship_name: str
    submitted_at: datetime | None
    average_score: float


@dataclass(slots=True)
class DashboardData:
    total_ships: int = 0
    total_ratings: int = 0
    user_ratings: int = 0
    recent_ratings: List[RecentRating] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DashboardData":
        return cls()


class DashboardService:
    def __init__(self, db: Session) -> None:
        self._ship_repo = ShipRepository(db)
        self._rating_repo = RatingRepository(db)
        self._user_repo = UserRepository(db)

    def load(self, evaluator_id: Optional[str]) -> DashboardData:
        if not evaluator_id:
            return DashboardData.empty()

        profile = self._user_repo.get(evaluator_id)
        entries, total_ratings = collect_user_ratings(
            self._ship_repo,
            self._rating_repo,
            evaluator_id,
            profile.display_name if profile else None,
        )
        return DashboardData(
            total_ships=self._ship_repo.count(),
            total_ratings=total_ratings,
            user_ratings=len(entries),
            recent_ratings=[
                RecentRating(
                    ship_name=e.ship.display_name,
                    submitted_at=e.rating.submitted_at,
                    average_score=e.rating.average_score,
                )
                for e in entries[:RECENT_RATINGS_LIMIT]
            ],
        )
