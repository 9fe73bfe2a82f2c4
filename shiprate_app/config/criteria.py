"""
Rating criteria, cabin types and legacy field names.

The criterion keys are persisted in every rating document and in the ship
``averages`` map. Do not rename them without migrating stored data.
"""

from __future__ import annotations

from typing import Dict, List

# Canonical criteria, in display order
CRITERIA: List[str] = [
    "embarkation_device",
    "cabin_temperature",
    "cabin_cleanliness",
    "bridge_equipment",
    "bridge_temperature",
    "food",
    "crew_relationship",
]

CRITERION_LABELS: Dict[str, str] = {
    "embarkation_device": "Embarkation/Disembarkation Device",
    "cabin_temperature": "Cabin Temperature",
    "cabin_cleanliness": "Cabin Cleanliness",
    "bridge_equipment": "Bridge - Equipment",
    "bridge_temperature": "Bridge - Temperature",
    "food": "Food",
    "crew_relationship": "Relationship with Master/Crew",
}

# Older app versions keyed ratings by Portuguese label, and averages by short keys
LEGACY_CRITERION_KEYS: Dict[str, str] = {
    "Dispositivo de Embarque/Desembarque": "embarkation_device",
    "Temperatura da Cabine": "cabin_temperature",
    "Limpeza da Cabine": "cabin_cleanliness",
    "Passadiço – Equipamentos": "bridge_equipment",
    "Passadiço – Temperatura": "bridge_temperature",
    "Comida": "food",
    "Relacionamento com comandante/tripulação": "crew_relationship",
    "dispositivo": "embarkation_device",
    "temp_cabine": "cabin_temperature",
    "limpeza_cabine": "cabin_cleanliness",
    "passadico_equip": "bridge_equipment",
    "passadico_temp": "bridge_temperature",
    "comida": "food",
    "relacionamento": "crew_relationship",
}

CABIN_TYPES: List[str] = ["Pilot", "Owner", "Spare Officer", "Crew"]

LEGACY_CABIN_TYPES: Dict[str, str] = {
    "PRT": "Pilot",
    "OWNER": "Owner",
}

# Canonical ship info key -> accepted raw names, first match wins
INFO_FIELD_ALIASES: Dict[str, List[str]] = {
    "crew_nationality": ["crew_nationality", "nacionalidadeTripulacao", "tripulacao"],
    "cabin_count": ["cabin_count", "numeroCabines", "cabines"],
    "minibar": ["minibar", "frigobar"],
    "sink": ["sink", "pia"],
    "microwave": ["microwave", "microondas"],
}

AMENITY_FIELDS: List[str] = ["minibar", "sink", "microwave"]

DEFAULT_DISPLAY_NAME = "Pilot"

RECENT_RATINGS_LIMIT = 3
