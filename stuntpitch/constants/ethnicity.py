"""Ethnic appearance codes: the ONLY allowed values for `profiles.ethnicity`."""
from __future__ import annotations

from typing import Optional

ETHNIC_APPEARANCE_OPTIONS = [
    {"label": "White", "value": "WHITE"},
    {"label": "Black", "value": "BLACK"},
    {"label": "Asian", "value": "ASIAN"},
    {"label": "Hispanic", "value": "HISPANIC"},
    {"label": "Middle Eastern", "value": "MIDDLE_EASTERN"},
]

ETHNICITY_VALUES = tuple(opt["value"] for opt in ETHNIC_APPEARANCE_OPTIONS)

# Alias keywords used both in the parser prompt and for legacy label migration
ETHNICITY_ALIASES = {
    "WHITE": ["white", "caucasian", "european", "anglo"],
    "BLACK": ["black", "african", "african american", "afro", "dark skin"],
    "ASIAN": ["asian", "chinese", "japanese", "korean", "indian", "vietnamese", "thai", "filipino", "south asian", "east asian"],
    "HISPANIC": ["hispanic", "latino", "latina", "mexican", "spanish", "puerto rican", "colombian", "venezuelan", "central american"],
    "MIDDLE_EASTERN": ["middle eastern", "arab", "persian", "iranian", "turkish", "lebanese", "syrian", "egyptian", "moroccan"],
}


def ethnicity_label(value: Optional[str]) -> str:
    if not value:
        return ""
    for opt in ETHNIC_APPEARANCE_OPTIONS:
        if opt["value"] == value:
            return opt["label"]
    return value


def normalize_ethnicity(label: Optional[str]) -> Optional[str]:
    """Map a code, a display label or a legacy free-text value to a code; None if unknown."""
    if not label:
        return None
    if label in ETHNICITY_VALUES:
        return label

    lowered = label.lower().strip()
    for opt in ETHNIC_APPEARANCE_OPTIONS:
        if opt["label"].lower() == lowered:
            return opt["value"]

    # "middle eastern" must win over plain substring hits further down the table
    for code in ("MIDDLE_EASTERN", "WHITE", "BLACK", "ASIAN", "HISPANIC"):
        if any(alias in lowered for alias in ETHNICITY_ALIASES[code]):
            return code
    return None
