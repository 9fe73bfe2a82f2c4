from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from shiprate_app.models import Suggestion, UserProfile
from shiprate_app.repositories.document_store import SERVER_TIMESTAMP, DocumentStore

USERS_COLLECTION = "users"
SUGGESTIONS_COLLECTION = "suggestions"


class UserRepository:
    """Read access to pilot profiles (written by the auth/registration flow)."""

    def __init__(self, db: Session) -> None:
        self._store = DocumentStore(db)

    def get(self, user_id: str) -> Optional[UserProfile]:
        doc = self._store.get(USERS_COLLECTION, user_id)
        if doc is None:
            return None
        data = doc.data
        return UserProfile(
            id=doc.id,
            display_name=data.get("displayName", data.get("nomeGuerra")),
            email=data.get("email") or "",
        )

    def save(self, profile: UserProfile) -> UserProfile:
        if profile.id is None:
            raise ValueError("UserProfile.id must be set for save")
        self._store.set(
            USERS_COLLECTION,
            profile.id,
            {"displayName": profile.display_name, "email": profile.email},
            merge=True,
        )
        return profile


class SuggestionRepository:
    def __init__(self, db: Session) -> None:
        self._store = DocumentStore(db)

    def create(self, suggestion: Suggestion) -> Suggestion:
        doc = self._store.add(
            SUGGESTIONS_COLLECTION,
            {
                "email": suggestion.email,
                "title": suggestion.title,
                "message": suggestion.message,
                "createdAt": SERVER_TIMESTAMP,
            },
        )
        suggestion.id = doc.id
        return suggestion

    def count(self) -> int:
        return len(self._store.list(SUGGESTIONS_COLLECTION))
