from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from shiprate_app.models import Ship, ShipInfo
from shiprate_app.repositories.document_store import Document, DocumentStore
from shiprate_app.services.errors import InvalidArgument, NotFound

logger = logging.getLogger(__name__)

SHIPS_COLLECTION = "ships"

LEGACY_IDENTITY_FIELDS = ("nome", "imo")


def dedup_key(name: str, code: str | None) -> str:
    """Unique key a ship is stored under; the IMO code wins over the name."""
    if code:
        return f"code:{code}"
    return f"name:{name}"


def _to_ship(doc: Document) -> Ship:
    data = doc.data
    # "nome"/"imo"/"medias" come from documents written by older app versions
    code = data.get("code", data.get("imo"))
    averages = data.get("averages", data.get("medias")) or {}
    return Ship(
        id=doc.id,
        name=(data.get("name", data.get("nome")) or "").strip(),
        code=(str(code).strip() or None) if code is not None else None,
        info=ShipInfo.from_dict(data.get("info")),
        averages={str(k): str(v) for k, v in averages.items()},
    )


def _to_document(ship: Ship) -> Dict[str, Any]:
    return {
        "name": ship.name,
        "code": ship.code,
        "info": ship.info.to_dict(),
        "averages": dict(ship.averages),
    }


class ShipRepository:
    """Repository for ship documents."""

    def __init__(self, db: Session) -> None:
        self._store = DocumentStore(db)

    def get(self, ship_id: str) -> Optional[Ship]:
        doc = self._store.get(SHIPS_COLLECTION, ship_id)
        if doc is None:
            return None
        return _to_ship(doc)

    def list(self) -> List[Ship]:
        ships = [_to_ship(doc) for doc in self._store.list(SHIPS_COLLECTION)]
        ships.sort(key=lambda s: s.display_name.lower())
        return ships

    def count(self) -> int:
        return len(self._store.list(SHIPS_COLLECTION))

    def _find_first(self, field_name: str, legacy_field: str, values: List[Any]) -> Optional[Ship]:
        docs = self._store.query(SHIPS_COLLECTION, field_name, values[0], limit=1)
        if docs:
            return _to_ship(docs[0])
        # Older documents carry only the legacy field; the canonical one wins when both exist
        for value in values:
            for doc in self._store.query(SHIPS_COLLECTION, legacy_field, value):
                if field_name not in doc.data:
                    return _to_ship(doc)
        return None

    def find_by_code(self, code: str) -> Optional[Ship]:
        values: List[Any] = [code]
        if code.isascii() and code.isdigit():
            # legacy "imo" was sometimes stored as a number
            values.append(int(code))
        return self._find_first("code", "imo", values)

    def find_by_name(self, name: str) -> Optional[Ship]:
        return self._find_first("name", "nome", [name])

    def create_if_absent(self, ship: Ship, unique_key: str) -> Tuple[Ship, bool]:
        doc, created = self._store.create_if_absent(
            SHIPS_COLLECTION, unique_key, _to_document(ship)
        )
        if created:
            logger.info("Created ship %s (%s)", doc.id, unique_key)
        return _to_ship(doc), created

    def rename(self, ship_id: str, name: str, code: str | None) -> Ship:
        """
        Change the name and IMO of a ship, moving its dedup key along.

        Raises InvalidArgument when another ship already resolves to the new
        identity, NotFound when the ship does not exist.
        """
        doc = self._store.get(SHIPS_COLLECTION, ship_id)
        if doc is None:
            raise NotFound(f"Ship {ship_id} not found.")

        holder = self.find_by_code(code) if code else self.find_by_name(name)
        if holder is not None and holder.id != ship_id:
            raise InvalidArgument(f"Another ship is already registered as {code or name}.")

        data = {k: v for k, v in doc.data.items() if k not in LEGACY_IDENTITY_FIELDS}
        data["name"] = name
        data["code"] = code or None
        stored = self._store.set(SHIPS_COLLECTION, ship_id, data, unique_key=dedup_key(name, code))
        logger.info("Renamed ship %s to name=%r code=%r", ship_id, name, code)
        return _to_ship(stored)

    def merge_info(self, ship_id: str, info: Dict[str, Any]) -> None:
        """Overwrite only the supplied info keys, keeping the others."""
        if not info:
            return
        self._store.set(SHIPS_COLLECTION, ship_id, {"info": dict(info)}, merge=True)

    def set_averages(self, ship_id: str, averages: Dict[str, str]) -> None:
        """Replace the whole averages map."""
        self._store.update(SHIPS_COLLECTION, ship_id, {"averages": dict(averages)})
