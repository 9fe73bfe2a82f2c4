"""
Repository layer for persistence (document store on SQLite via SQLAlchemy).
"""

from shiprate_app.repositories.database import SessionLocal, Base, init_database
from shiprate_app.repositories.document_store import DocumentStore, SERVER_TIMESTAMP
from shiprate_app.repositories.ship_repository import ShipRepository
from shiprate_app.repositories.rating_repository import RatingRepository
from shiprate_app.repositories.user_repository import UserRepository, SuggestionRepository

__all__ = [
    "SessionLocal",
    "Base",
    "init_database",
    "DocumentStore",
    "SERVER_TIMESTAMP",
    "ShipRepository",
    "RatingRepository",
    "UserRepository",
    "SuggestionRepository",
]
