from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class UserProfile:
    id: str | None = None
    display_name: str | None = None
    email: str = ""


@dataclass(slots=True)
class Suggestion:
    id: str | None = None
    email: str = ""
    title: str = ""
    message: str = ""
    created_at: datetime | None = None
