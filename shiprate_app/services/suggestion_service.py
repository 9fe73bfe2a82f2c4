from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from shiprate_app.models import Suggestion
from shiprate_app.repositories.user_repository import SuggestionRepository
from shiprate_app.services.errors import InvalidArgument

logger = logging.getLogger(__name__)


class SuggestionService:
    """Stores pilot feedback (suggestions, criticism, praise)."""

    def __init__(self, db: Session) -> None:
        self._repo = SuggestionRepository(db)

    def send(self, email: str, title: str, message: str) -> Suggestion:
        if not (message or "").strip():
            raise InvalidArgument("Suggestion message is required.")
        suggestion = self._repo.create(
            Suggestion(
                email=(email or "").strip(),
                title=(title or "").strip(),
                message=message.strip(),
            )
        )
        logger.info("Suggestion %s received from %s", suggestion.id, suggestion.email or "anonymous")
        return suggestion
