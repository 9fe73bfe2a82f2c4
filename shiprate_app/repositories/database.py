"""
SQLAlchemy database setup for the ShipRate backend.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase


class Base(DeclarativeBase):
    """Base declarative class for ORM models."""

    pass


# Will be assigned a sessionmaker instance by init_database at startup
SessionLocal: sessionmaker | None = None


def create_session_factory(url: str) -> sessionmaker:
    """Create tables for ``url`` and return a sessionmaker bound to it."""
    # Import ORM models so their metadata is registered on Base
    from shiprate_app.repositories.document_store import DocumentORM  # noqa: F401

    engine = create_engine(url, future=True, echo=False)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )


def init_database(db_path: Path) -> sessionmaker:
    """
    Initialize the SQLite database, create tables, and configure SessionLocal.

    This must be called once at application startup (done in main.py).
    """
    global SessionLocal
    SessionLocal = create_session_factory(f"sqlite:///{db_path}")
    return SessionLocal
