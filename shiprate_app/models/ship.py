from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(slots=True)
class ShipInfo:
    # None means "never reported", distinct from False
    crew_nationality: str | None = None
    cabin_count: int | None = None
    minibar: bool | None = None
    sink: bool | None = None
    microwave: bool | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ShipInfo":
        data = data or {}
        return cls(
            crew_nationality=data.get("crew_nationality"),
            cabin_count=data.get("cabin_count"),
            minibar=data.get("minibar"),
            sink=data.get("sink"),
            microwave=data.get("microwave"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Only the reported fields."""
        return {
            key: value
            for key, value in (
                ("crew_nationality", self.crew_nationality),
                ("cabin_count", self.cabin_count),
                ("minibar", self.minibar),
                ("sink", self.sink),
                ("microwave", self.microwave),
            )
            if value is not None
        }


@dataclass(slots=True)
class Ship:
    id: str | None = None
    name: str = ""
    code: str | None = None  # IMO number
    info: ShipInfo = field(default_factory=ShipInfo)

    # criterion key -> mean score formatted with one decimal ("4.3")
    averages: Dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.code or "Unnamed ship"
