"""
Simple text-based summary of a single rating.
"""

from __future__ import annotations

from shiprate_app.config.criteria import CRITERIA, CRITERION_LABELS
from shiprate_app.models import Rating, Ship


def _fmt_date(value) -> str:
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")


def _yes_no(value: bool | None) -> str:
    if value is None:
        return "-"
    return "Yes" if value else "No"


def build_rating_summary_text(ship: Ship, rating: Rating) -> str:
    lines: list[str] = []
    imo = f" (IMO: {ship.code})" if ship.code else ""
    lines.append(f"Ship: {ship.display_name}{imo}")
    lines.append(f"Pilot: {rating.evaluator_display_name or '-'}")
    lines.append(f"Rated on: {_fmt_date(rating.submitted_at)}")
    lines.append(f"Disembarkation: {_fmt_date(rating.disembarkation_date)}")
    cabin = rating.cabin_type or "-"
    if rating.cabin_deck:
        cabin = f"{cabin} (deck {rating.cabin_deck})"
    lines.append(f"Cabin: {cabin}")
    lines.append("")
    for criterion in CRITERIA:
        entry = rating.criteria_scores.get(criterion)
        score = f"{entry.score:.1f}" if entry and entry.score > 0 else "n/a"
        line = f"{CRITERION_LABELS[criterion]}: {score}"
        if entry and entry.observation:
            line += f" - {entry.observation}"
        lines.append(line)
    lines.append(f"Overall: {rating.average_score:.1f}")

    info = rating.ship_info
    if info.to_dict():
        lines.append("")
        if info.crew_nationality:
            lines.append(f"Crew nationality: {info.crew_nationality}")
        if info.cabin_count is not None:
            lines.append(f"Cabins: {info.cabin_count}")
        lines.append(
            f"Minibar: {_yes_no(info.minibar)}  Sink: {_yes_no(info.sink)}  "
            f"Microwave: {_yes_no(info.microwave)}"
        )
    bridge = rating.bridge_info
    if bridge.to_dict():
        lines.append(
            f"Bridge - Minibar: {_yes_no(bridge.minibar)}  Sink: {_yes_no(bridge.sink)}  "
            f"Microwave: {_yes_no(bridge.microwave)}"
        )
    if rating.general_observation:
        lines.append("")
        lines.append(f"Notes: {rating.general_observation}")
    return "\n".join(lines)
