"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
import tempfile
from datetime import date
from pathlib import Path

import pytest

# Ensure project root is on path when running tests
_project_root = Path(__file__).resolve().parents[2]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from shiprate_app.models import UserProfile
from shiprate_app.repositories.database import create_session_factory
from shiprate_app.repositories.user_repository import UserRepository


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database and return its path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass  # Windows may hold file; ignore cleanup failure


@pytest.fixture
def db_session(temp_db):
    """Provide a database session with initialized schema."""
    SessionLocal = create_session_factory(f"sqlite:///{temp_db}")
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        SessionLocal.kw["bind"].dispose()


@pytest.fixture
def pilot(db_session):
    """A registered pilot profile."""
    return UserRepository(db_session).save(
        UserProfile(id="pilot-1", display_name="Cmdt. Silva", email="silva@example.com")
    )


@pytest.fixture
def full_criteria():
    """Raw form data answering every criterion."""
    return {
        "embarkation_device": {"score": 4.0, "observation": "Pilot ladder OK"},
        "cabin_temperature": {"score": 3.0, "observation": ""},
        "cabin_cleanliness": {"score": 5.0},
        "bridge_equipment": {"score": "4,5"},
        "bridge_temperature": {"score": 2},
        "food": {"score": 4.0, "observation": "Good coffee"},
        "crew_relationship": {"score": 5.0},
    }


@pytest.fixture
def submission(full_criteria):
    """Keyword arguments for RatingService.submit_rating."""
    return dict(
        evaluator_id="pilot-1",
        evaluator_display_name=None,
        ship_name="MSC Divina",
        ship_code="9585285",
        cabin_type="Pilot",
        disembarkation_date=date(2024, 5, 1),
        general_observation="Smooth transfer",
        raw_criteria=full_criteria,
        raw_info={"crew_nationality": " Filipino ", "cabin_count": "2", "minibar": True},
    )
