"""
Per-criterion averages of a ship, recomputed from all of its ratings.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from shiprate_app.config.criteria import CRITERIA
from shiprate_app.models import Rating
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.ship_repository import ShipRepository
from shiprate_app.services.ship_resolver import ShipHandle

logger = logging.getLogger(__name__)


def format_average(value: float) -> str:
    """One decimal, halves rounded up (4.25 -> "4.3")."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_averages(ratings: Iterable[Rating]) -> Dict[str, str]:
    """
    Average each criterion over the ratings that answered it.

    Scores of 0.0 (not answered) count neither in the sum nor in the
    divisor. Criteria nobody answered are absent from the result. Values
    are formatted with one decimal, e.g. ``"4.3"``.
    """
    totals = {c: 0.0 for c in CRITERIA}
    counts = {c: 0 for c in CRITERIA}

    for rating in ratings:
        for criterion in CRITERIA:
            entry = rating.criteria_scores.get(criterion)
            if entry is not None and entry.score > 0.0:
                totals[criterion] += entry.score
                counts[criterion] += 1

    return {
        criterion: format_average(totals[criterion] / counts[criterion])
        for criterion in CRITERIA
        if counts[criterion] > 0
    }


class RatingAggregator:
    def __init__(self, db: Session) -> None:
        self._ship_repo = ShipRepository(db)
        self._rating_repo = RatingRepository(db)

    def recompute_averages(self, ship: ShipHandle | str) -> Dict[str, str]:
        """Read every rating of the ship and replace its stored averages."""
        ship_id = ship.id if isinstance(ship, ShipHandle) else ship
        ratings = self._rating_repo.list_for_ship(ship_id)
        averages = compute_averages(ratings)
        self._ship_repo.set_averages(ship_id, averages)
        logger.info(
            "Recomputed averages for ship %s from %d rating(s): %s",
            ship_id,
            len(ratings),
            averages,
        )
        return averages
