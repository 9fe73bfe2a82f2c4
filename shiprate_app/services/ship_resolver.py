"""
Find-or-create of the canonical ship record for a submitted name/IMO.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from shiprate_app.models import Ship
from shiprate_app.repositories.ship_repository import ShipRepository, dedup_key
from shiprate_app.services.errors import InvalidArgument

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ShipHandle:
    id: str
    ship: Ship
    created: bool = False


class ShipResolver:
    """Resolves a ship by IMO code (preferred) or exact name, creating it when unknown."""

    def __init__(self, db: Session) -> None:
        self._repo = ShipRepository(db)

    def resolve_ship(self, name: str | None, code: str | None) -> ShipHandle:
        name = (name or "").strip()
        code = (code or "").strip()
        if not name and not code:
            raise InvalidArgument("Ship name or IMO is required.")

        if code:
            existing = self._repo.find_by_code(code)
        else:
            # Exact, case-sensitive match
            existing = self._repo.find_by_name(name)
        if existing is not None:
            logger.debug("Resolved ship %s for name=%r code=%r", existing.id, name, code)
            return ShipHandle(id=existing.id, ship=existing, created=False)

        ship, created = self._repo.create_if_absent(
            Ship(name=name, code=code or None),
            unique_key=dedup_key(name, code),
        )
        return ShipHandle(id=ship.id, ship=ship, created=created)
