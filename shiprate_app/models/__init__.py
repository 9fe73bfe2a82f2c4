"""
Domain models for the ShipRate backend.

These are pure Python/domain classes, separate from the stored documents.
"""

from shiprate_app.models.ship import Ship, ShipInfo
from shiprate_app.models.rating import Rating, CriterionScore
from shiprate_app.models.user import UserProfile, Suggestion

__all__ = [
    "Ship",
    "ShipInfo",
    "Rating",
    "CriterionScore",
    "UserProfile",
    "Suggestion",
]
