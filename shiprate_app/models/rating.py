from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict

from shiprate_app.models.ship import ShipInfo


@dataclass(slots=True)
class CriterionScore:
    # 0.0 means "not answered" and is left out of averages
    score: float = 0.0
    observation: str = ""


@dataclass(slots=True)
class Rating:
    id: str | None = None
    ship_id: str | None = None

    evaluator_id: str | None = None
    # Snapshot taken at submission time, later profile renames do not apply
    evaluator_display_name: str = ""

    disembarkation_date: date | None = None
    cabin_type: str = ""
    cabin_deck: str | None = None
    general_observation: str = ""

    submitted_at: datetime | None = None
    updated_at: datetime | None = None

    ship_info: ShipInfo = field(default_factory=ShipInfo)
    # Amenities reported in the bridge section of the form, only minibar/sink/microwave
    bridge_info: ShipInfo = field(default_factory=ShipInfo)
    criteria_scores: Dict[str, CriterionScore] = field(default_factory=dict)

    @property
    def answered_scores(self) -> list[float]:
        return [c.score for c in self.criteria_scores.values() if c.score > 0.0]

    @property
    def average_score(self) -> float:
        """Mean of the answered criteria of this single rating (0.0 if none)."""
        scores = self.answered_scores
        if not scores:
            return 0.0
        return sum(scores) / len(scores)
