"""
Rating submission, edit and deletion.

A submission resolves (or creates) the ship, normalizes the raw form data,
appends the rating, merges the reported ship info and recomputes the ship
averages. The steps are committed one by one: when a later step fails the
earlier writes stay and the error reaches the caller unchanged. The next
write for the same ship recomputes the averages from scratch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from shiprate_app.config.criteria import DEFAULT_DISPLAY_NAME
from shiprate_app.models import Rating, ShipInfo
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.ship_repository import ShipRepository
from shiprate_app.repositories.user_repository import UserRepository
from shiprate_app.services.errors import (
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from shiprate_app.services.rating_aggregator import RatingAggregator
from shiprate_app.services.rating_normalizer import (
    normalize,
    normalize_bridge_info,
    normalize_cabin_type,
)
from shiprate_app.services.ship_resolver import ShipResolver

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SubmissionResult:
    ship_id: str
    rating_id: str
    ship_created: bool = False
    averages: Dict[str, str] = field(default_factory=dict)


def _require_identity(evaluator_id: Optional[str]) -> str:
    if evaluator_id is None or not str(evaluator_id).strip():
        raise Unauthenticated()
    return str(evaluator_id).strip()


def _as_date(value: date | datetime | str | None) -> date:
    if value is None:
        raise InvalidArgument("Disembarkation date is required.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError as exc:
        raise InvalidArgument(f"Invalid disembarkation date: {value!r}") from exc


class RatingService:
    """Entry point for writing ratings."""

    def __init__(self, db: Session) -> None:
        self._resolver = ShipResolver(db)
        self._aggregator = RatingAggregator(db)
        self._ship_repo = ShipRepository(db)
        self._rating_repo = RatingRepository(db)
        self._user_repo = UserRepository(db)

    def submit_rating(
        self,
        evaluator_id: Optional[str],
        evaluator_display_name: Optional[str],
        ship_name: Optional[str],
        ship_code: Optional[str],
        cabin_type: Optional[str],
        disembarkation_date: date | datetime | str | None,
        general_observation: Optional[str],
        raw_criteria: Mapping[str, Any] | None,
        raw_info: Mapping[str, Any] | None,
        cabin_deck: Optional[str] = None,
        raw_bridge_info: Mapping[str, Any] | None = None,
    ) -> SubmissionResult:
        evaluator_id = _require_identity(evaluator_id)
        if not (ship_name or "").strip() and not (ship_code or "").strip():
            raise InvalidArgument("Ship name or IMO is required.")
        disembarked_on = _as_date(disembarkation_date)

        handle = self._resolver.resolve_ship(ship_name, ship_code)
        display_name = self._display_name(evaluator_id, evaluator_display_name)
        criteria_scores, info_final = normalize(raw_criteria, raw_info)

        rating = self._rating_repo.add(
            Rating(
                ship_id=handle.id,
                evaluator_id=evaluator_id,
                evaluator_display_name=display_name,
                disembarkation_date=disembarked_on,
                cabin_type=normalize_cabin_type(cabin_type),
                cabin_deck=(cabin_deck or "").strip() or None,
                general_observation=(general_observation or "").strip(),
                ship_info=ShipInfo.from_dict(info_final),
                bridge_info=ShipInfo.from_dict(normalize_bridge_info(raw_bridge_info)),
                criteria_scores=criteria_scores,
            )
        )
        self._ship_repo.merge_info(handle.id, info_final)
        averages = self._aggregator.recompute_averages(handle)

        logger.info(
            "Rating %s submitted by %s for ship %s (new ship: %s)",
            rating.id,
            evaluator_id,
            handle.id,
            handle.created,
        )
        return SubmissionResult(
            ship_id=handle.id,
            rating_id=rating.id,
            ship_created=handle.created,
            averages=averages,
        )

    def update_rating(
        self,
        evaluator_id: Optional[str],
        ship_id: str,
        rating_id: str,
        cabin_type: Optional[str],
        disembarkation_date: date | datetime | str | None,
        general_observation: Optional[str],
        raw_criteria: Mapping[str, Any] | None,
        raw_info: Mapping[str, Any] | None,
        cabin_deck: Optional[str] = None,
        ship_name: Optional[str] = None,
        ship_code: Optional[str] = None,
        raw_bridge_info: Mapping[str, Any] | None = None,
    ) -> Rating:
        """
        Edit one's own rating; the ship averages are recomputed afterwards.

        Passing ``ship_name`` or ``ship_code`` also renames the ship the rating
        belongs to (for every rating of that ship). Omitted parts keep their
        current value.
        """
        evaluator_id = _require_identity(evaluator_id)
        rating = self._own_rating(evaluator_id, ship_id, rating_id)
        disembarked_on = _as_date(disembarkation_date)
        if ship_name is not None or ship_code is not None:
            self._rename_ship(ship_id, ship_name, ship_code)
        criteria_scores, info_final = normalize(raw_criteria, raw_info)

        rating.disembarkation_date = disembarked_on
        rating.cabin_type = normalize_cabin_type(cabin_type)
        rating.cabin_deck = (cabin_deck or "").strip() or None
        rating.general_observation = (general_observation or "").strip()
        rating.ship_info = ShipInfo.from_dict(info_final)
        rating.bridge_info = ShipInfo.from_dict(normalize_bridge_info(raw_bridge_info))
        rating.criteria_scores = criteria_scores
        self._rating_repo.update(rating)

        self._ship_repo.merge_info(ship_id, info_final)
        self._aggregator.recompute_averages(ship_id)
        logger.info("Rating %s of ship %s edited by %s", rating_id, ship_id, evaluator_id)
        return rating

    def delete_rating(self, evaluator_id: Optional[str], ship_id: str, rating_id: str) -> Dict[str, str]:
        """Delete one's own rating and return the recomputed ship averages."""
        evaluator_id = _require_identity(evaluator_id)
        self._own_rating(evaluator_id, ship_id, rating_id)
        self._rating_repo.delete(ship_id, rating_id)
        logger.info("Rating %s of ship %s deleted by %s", rating_id, ship_id, evaluator_id)
        return self._aggregator.recompute_averages(ship_id)

    def _own_rating(self, evaluator_id: str, ship_id: str, rating_id: str) -> Rating:
        rating = self._rating_repo.get(ship_id, rating_id)
        if rating is None:
            raise NotFound(f"Rating {rating_id} of ship {ship_id} not found.")
        if rating.evaluator_id != evaluator_id:
            raise PermissionDenied("Only the author can change a rating.")
        return rating

    def _rename_ship(self, ship_id: str, ship_name: Optional[str], ship_code: Optional[str]) -> None:
        ship = self._ship_repo.get(ship_id)
        if ship is None:
            raise NotFound(f"Ship {ship_id} not found.")
        name = (ship.name if ship_name is None else ship_name).strip()
        code = ((ship.code or "") if ship_code is None else ship_code).strip()
        if not name and not code:
            raise InvalidArgument("Ship name or IMO is required.")
        if name == ship.name and (code or None) == ship.code:
            return
        self._ship_repo.rename(ship_id, name, code or None)

    def _display_name(self, evaluator_id: str, supplied: Optional[str]) -> str:
        if supplied and supplied.strip():
            return supplied.strip()
        profile = self._user_repo.get(evaluator_id)
        if profile is not None and profile.display_name:
            return str(profile.display_name).strip() or DEFAULT_DISPLAY_NAME
        return DEFAULT_DISPLAY_NAME
