"""
Repository for ratings, stored as a sub-collection of their ship.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from shiprate_app.models import Rating, ShipInfo
from shiprate_app.repositories.document_store import (
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    collection_path,
)
from shiprate_app.repositories.ship_repository import SHIPS_COLLECTION
from shiprate_app.services.rating_normalizer import (
    criteria_to_dict,
    normalize_bridge_info,
    normalize_cabin_type,
    normalize_criteria,
    normalize_info,
)

logger = logging.getLogger(__name__)

RATINGS_SUBCOLLECTION = "ratings"


def ratings_collection(ship_id: str) -> str:
    return collection_path(SHIPS_COLLECTION, ship_id, RATINGS_SUBCOLLECTION)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Any) -> Optional[date]:
    parsed = _parse_datetime(value)
    return parsed.date() if parsed else None


def _to_rating(ship_id: str, doc: Document) -> Rating:
    data = doc.data
    # Documents from older app versions use "itens"/"nota", "nomeGuerra",
    # "usuarioId", "infoNavio", "infoPassadico" and "createdAt"/"data"
    raw_criteria = data.get("criteriaScores", data.get("itens"))
    return Rating(
        id=doc.id,
        ship_id=ship_id,
        evaluator_id=data.get("evaluatorId", data.get("usuarioId")),
        evaluator_display_name=str(
            data.get("evaluatorDisplayName", data.get("nomeGuerra")) or ""
        ),
        disembarkation_date=_parse_date(
            data.get("disembarkationDate", data.get("dataDesembarque"))
        ),
        cabin_type=normalize_cabin_type(data.get("cabinType", data.get("tipoCabine"))),
        cabin_deck=data.get("cabinDeck", data.get("deckCabine")),
        general_observation=str(
            data.get("generalObservation", data.get("observacaoGeral")) or ""
        ),
        submitted_at=_parse_datetime(
            data.get("submittedAt", data.get("createdAt", data.get("data")))
        ),
        updated_at=_parse_datetime(data.get("updatedAt")),
        ship_info=ShipInfo.from_dict(normalize_info(data.get("shipInfo", data.get("infoNavio")))),
        bridge_info=ShipInfo.from_dict(
            normalize_bridge_info(data.get("bridgeInfo", data.get("infoPassadico")))
        ),
        criteria_scores=normalize_criteria(raw_criteria if isinstance(raw_criteria, dict) else None),
    )


def _to_document(rating: Rating) -> Dict[str, Any]:
    return {
        "evaluatorId": rating.evaluator_id,
        "evaluatorDisplayName": rating.evaluator_display_name,
        "disembarkationDate": (
            rating.disembarkation_date.isoformat() if rating.disembarkation_date else None
        ),
        "cabinType": rating.cabin_type,
        "cabinDeck": rating.cabin_deck,
        "generalObservation": rating.general_observation,
        "shipInfo": rating.ship_info.to_dict(),
        "bridgeInfo": rating.bridge_info.to_dict(),
        "criteriaScores": criteria_to_dict(rating.criteria_scores),
    }


class RatingRepository:
    """Repository for the ratings of a ship."""

    def __init__(self, db: Session) -> None:
        self._store = DocumentStore(db)

    def list_for_ship(self, ship_id: str) -> List[Rating]:
        return [
            _to_rating(ship_id, doc)
            for doc in self._store.list(ratings_collection(ship_id))
        ]

    def get(self, ship_id: str, rating_id: str) -> Optional[Rating]:
        doc = self._store.get(ratings_collection(ship_id), rating_id)
        if doc is None:
            return None
        return _to_rating(ship_id, doc)

    def add(self, rating: Rating) -> Rating:
        if rating.ship_id is None:
            raise ValueError("Rating.ship_id must be set for add")
        data = _to_document(rating)
        data["submittedAt"] = SERVER_TIMESTAMP
        doc = self._store.add(ratings_collection(rating.ship_id), data)
        rating.id = doc.id
        rating.submitted_at = _parse_datetime(doc.data.get("submittedAt"))
        logger.info("Stored rating %s for ship %s", rating.id, rating.ship_id)
        return rating

    def update(self, rating: Rating) -> Rating:
        if rating.ship_id is None or rating.id is None:
            raise ValueError("Rating.ship_id and Rating.id must be set for update")
        data = _to_document(rating)
        data["updatedAt"] = SERVER_TIMESTAMP
        doc = self._store.update(ratings_collection(rating.ship_id), rating.id, data)
        rating.updated_at = _parse_datetime(doc.data.get("updatedAt"))
        return rating

    def delete(self, ship_id: str, rating_id: str) -> None:
        self._store.delete(ratings_collection(ship_id), rating_id)
