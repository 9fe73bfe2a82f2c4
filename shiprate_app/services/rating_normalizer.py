"""
Coercion of raw rating submissions into the canonical stored shape.

Everything here is best-effort and never raises: unknown criteria are
dropped, unparseable scores become 0.0 ("not answered") and legacy field
names are mapped to the canonical ones.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Tuple

from shiprate_app.config.criteria import (
    AMENITY_FIELDS,
    CRITERIA,
    INFO_FIELD_ALIASES,
    LEGACY_CABIN_TYPES,
    LEGACY_CRITERION_KEYS,
)
from shiprate_app.models import CriterionScore


def to_double(value: Any) -> float:
    """Numbers pass through, strings accept a decimal comma, anything else is 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip().replace(",", "."))
        except ValueError:
            return 0.0
    else:
        return 0.0
    return result if math.isfinite(result) else 0.0


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text.replace(",", ".")))
    except (ValueError, OverflowError):
        return 0


def canonical_criterion_key(key: Any) -> Optional[str]:
    key = str(key)
    if key in CRITERIA:
        return key
    return LEGACY_CRITERION_KEYS.get(key)


def _entry_field(entry: Any, *names: str) -> Any:
    if not isinstance(entry, Mapping):
        return None
    for name in names:
        if entry.get(name) is not None:
            return entry[name]
    return None


def normalize_criteria(raw_criteria: Mapping[str, Any] | None) -> Dict[str, CriterionScore]:
    """One entry per canonical criterion, whatever the caller supplied."""
    if not isinstance(raw_criteria, Mapping):
        raw_criteria = {}

    resolved: Dict[str, Any] = {}
    for key, entry in raw_criteria.items():
        canonical = canonical_criterion_key(key)
        if canonical is None:
            continue
        # A canonical key beats a legacy alias of the same criterion
        if key == canonical or canonical not in resolved:
            resolved[canonical] = entry

    scores: Dict[str, CriterionScore] = {}
    for criterion in CRITERIA:
        entry = resolved.get(criterion)
        if isinstance(entry, Mapping):
            score = to_double(_entry_field(entry, "score", "nota"))
            observation = _entry_field(entry, "observation", "observacao")
        else:
            # bare score
            score = to_double(entry)
            observation = None
        scores[criterion] = CriterionScore(
            score=score,
            observation="" if observation is None else str(observation),
        )
    return scores


def normalize_info(raw_info: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Keep only the info fields the caller actually reported."""
    if not isinstance(raw_info, Mapping) or not raw_info:
        return {}

    info: Dict[str, Any] = {}
    for canonical, aliases in INFO_FIELD_ALIASES.items():
        value = next((raw_info[a] for a in aliases if raw_info.get(a) is not None), None)
        if value is None:
            continue
        if canonical == "crew_nationality":
            info[canonical] = str(value).strip()
        elif canonical == "cabin_count":
            info[canonical] = max(0, to_int(value))
        elif canonical in AMENITY_FIELDS:
            info[canonical] = value is True
    return info


def normalize_bridge_info(raw_bridge_info: Mapping[str, Any] | None) -> Dict[str, bool]:
    """Amenities reported in the bridge section of the form; other keys are dropped."""
    info = normalize_info(raw_bridge_info)
    return {key: info[key] for key in AMENITY_FIELDS if key in info}


def normalize_cabin_type(value: Any) -> str:
    text = "" if value is None else str(value).strip()
    return LEGACY_CABIN_TYPES.get(text, text)


def normalize(
    raw_criteria: Mapping[str, Any] | None,
    raw_info: Mapping[str, Any] | None,
) -> Tuple[Dict[str, CriterionScore], Dict[str, Any]]:
    return normalize_criteria(raw_criteria), normalize_info(raw_info)


def criteria_to_dict(scores: Mapping[str, CriterionScore]) -> Dict[str, Dict[str, Any]]:
    return {
        key: {"score": value.score, "observation": value.observation}
        for key, value in scores.items()
    }
