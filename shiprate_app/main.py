"""
Command-line entry point for the ShipRate backend.

Sets up settings, logging and the database, then dispatches to the
services. Run as ``python -m shiprate_app.main <command> ...``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from shiprate_app.config.criteria import CABIN_TYPES, CRITERIA, CRITERION_LABELS
from shiprate_app.config.settings import Settings, init_logging
from shiprate_app.repositories import database
from shiprate_app.reports import build_rating_summary_text, export_rating_to_pdf
from shiprate_app.services.dashboard_service import DashboardService
from shiprate_app.services.errors import InvalidArgument, NotFound, ShipRateError
from shiprate_app.services.my_ratings_service import MyRatingsService
from shiprate_app.services.rating_service import RatingService
from shiprate_app.services.ship_search_service import ShipSearchService
from shiprate_app.services.suggestion_service import SuggestionService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shiprate", description="Rate ships as a maritime pilot")
    parser.add_argument("--data-dir", type=Path, help="Directory holding shiprate.db and the log")
    sub = parser.add_subparsers(dest="command", required=True)

    cabin_help = "cabin_type is one of " + ", ".join(CABIN_TYPES)
    submit = sub.add_parser(
        "submit", help="Submit a rating from a JSON file", description=cabin_help
    )
    submit.add_argument("rating_file", type=Path)
    submit.add_argument("--user", help="Evaluator id")
    submit.add_argument("--name", help="Display name to snapshot (default: profile lookup)")

    edit = sub.add_parser(
        "edit", help="Edit one's own rating from a JSON file", description=cabin_help
    )
    edit.add_argument("ship_id")
    edit.add_argument("rating_id")
    edit.add_argument("rating_file", type=Path)
    edit.add_argument("--user", help="Evaluator id")

    delete = sub.add_parser("delete", help="Delete one's own rating")
    delete.add_argument("ship_id")
    delete.add_argument("rating_id")
    delete.add_argument("--user", help="Evaluator id")

    search = sub.add_parser("search", help="Search ships by name or IMO")
    search.add_argument("term")

    show = sub.add_parser("show", help="Show a ship with its averages and ratings")
    show.add_argument("ship_id")

    mine = sub.add_parser("my-ratings", help="List the ratings of a pilot")
    mine.add_argument("--user", help="Evaluator id")

    dash = sub.add_parser("dashboard", help="Totals and the latest ratings of a pilot")
    dash.add_argument("--user", help="Evaluator id")

    pdf = sub.add_parser("export-pdf", help="Export one rating as PDF")
    pdf.add_argument("ship_id")
    pdf.add_argument("rating_id")
    pdf.add_argument("--out", type=Path, default=Path("."), help="Output file or directory")

    suggest = sub.add_parser("suggest", help="Send a suggestion")
    suggest.add_argument("--email", default="")
    suggest.add_argument("--title", default="Suggestion")
    suggest.add_argument("--message", required=True)
    return parser


def _load_rating_file(path: Path) -> dict:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidArgument(f"Cannot read rating file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidArgument(f"Rating file {path} must hold a JSON object.")
    return payload


def _text(value) -> str | None:
    # IMO numbers are often written as JSON numbers
    return None if value is None else str(value)


def _cmd_submit(db, args) -> None:
    payload = _load_rating_file(args.rating_file)
    result = RatingService(db).submit_rating(
        evaluator_id=args.user,
        evaluator_display_name=args.name,
        ship_name=_text(payload.get("ship_name")),
        ship_code=_text(payload.get("ship_code")),
        cabin_type=payload.get("cabin_type"),
        disembarkation_date=payload.get("disembarkation_date"),
        general_observation=payload.get("general_observation"),
        raw_criteria=payload.get("criteria"),
        raw_info=payload.get("info"),
        cabin_deck=payload.get("cabin_deck"),
        raw_bridge_info=payload.get("bridge_info"),
    )
    print(f"Saved rating {result.rating_id} for ship {result.ship_id}")
    for criterion in CRITERIA:
        if criterion in result.averages:
            print(f"  {CRITERION_LABELS[criterion]}: {result.averages[criterion]}")


def _cmd_edit(db, args) -> None:
    payload = _load_rating_file(args.rating_file)
    rating = RatingService(db).update_rating(
        evaluator_id=args.user,
        ship_id=args.ship_id,
        rating_id=args.rating_id,
        cabin_type=payload.get("cabin_type"),
        disembarkation_date=payload.get("disembarkation_date"),
        general_observation=payload.get("general_observation"),
        raw_criteria=payload.get("criteria"),
        raw_info=payload.get("info"),
        cabin_deck=payload.get("cabin_deck"),
        ship_name=_text(payload.get("ship_name")),
        ship_code=_text(payload.get("ship_code")),
        raw_bridge_info=payload.get("bridge_info"),
    )
    print(f"Updated rating {rating.id} of ship {rating.ship_id}")


def _cmd_delete(db, args) -> None:
    averages = RatingService(db).delete_rating(args.user, args.ship_id, args.rating_id)
    print(f"Deleted rating {args.rating_id}; {len(averages)} criteria still rated")


def _cmd_search(db, args) -> None:
    for ship in ShipSearchService(db).search_ships(args.term):
        imo = f" IMO {ship.code}" if ship.code else ""
        print(f"{ship.id}  {ship.display_name}{imo}")


def _cmd_show(db, args) -> None:
    svc = ShipSearchService(db)
    ship = svc.get_ship(args.ship_id)
    if ship is None:
        raise NotFound(f"Ship {args.ship_id} not found.")
    ratings = svc.list_ratings(args.ship_id)
    print(ship.display_name + (f" (IMO: {ship.code})" if ship.code else ""))
    for criterion in CRITERIA:
        print(f"  {CRITERION_LABELS[criterion]}: {ship.averages.get(criterion, '-')}")
    for name, value in svc.resolve_amenities(ship, ratings).items():
        print(f"  {name}: {'-' if value is None else ('yes' if value else 'no')}")
    print(f"{len(ratings)} rating(s)")
    for rating in ratings:
        print(f"- {rating.id} by {rating.evaluator_display_name} on {rating.disembarkation_date}")


def _cmd_my_ratings(db, args) -> None:
    svc = MyRatingsService(db)
    for entry in svc.list_user_ratings(args.user):
        print(
            f"{entry.ship.id}/{entry.rating.id}  {entry.ship.display_name}  "
            f"{svc.rating_average(entry.rating):.1f}"
        )


def _cmd_dashboard(db, args) -> None:
    data = DashboardService(db).load(args.user)
    print(f"Ships: {data.total_ships}  Ratings: {data.total_ratings}  Mine: {data.user_ratings}")
    for recent in data.recent_ratings:
        print(f"- {recent.ship_name}: {recent.average_score:.1f}")


def _cmd_export_pdf(db, args) -> None:
    svc = ShipSearchService(db)
    ship = svc.get_ship(args.ship_id)
    rating = next((r for r in svc.list_ratings(args.ship_id) if r.id == args.rating_id), None)
    if ship is None or rating is None:
        raise NotFound(f"Rating {args.rating_id} of ship {args.ship_id} not found.")
    path = export_rating_to_pdf(args.out, ship, rating)
    print(build_rating_summary_text(ship, rating))
    print(f"PDF written to {path}")


def _cmd_suggest(db, args) -> None:
    suggestion = SuggestionService(db).send(args.email, args.title, args.message)
    print(f"Thank you! Suggestion {suggestion.id} saved.")


COMMANDS = {
    "submit": _cmd_submit,
    "edit": _cmd_edit,
    "delete": _cmd_delete,
    "search": _cmd_search,
    "show": _cmd_show,
    "my-ratings": _cmd_my_ratings,
    "dashboard": _cmd_dashboard,
    "export-pdf": _cmd_export_pdf,
    "suggest": _cmd_suggest,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Bootstraps the backend and runs one command."""
    args = build_parser().parse_args(argv)

    # Initialize logging & settings
    settings = Settings.from_data_dir(args.data_dir) if args.data_dir else Settings.default()
    init_logging(settings)

    # Initialize database (SQLite) and ORM mappings
    session_factory = database.init_database(settings.db_path)

    with session_factory() as db:
        try:
            COMMANDS[args.command](db, args)
        except ShipRateError as exc:
            logger.warning("%s failed: %s", args.command, exc.message)
            print(f"Error: {exc.message}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
