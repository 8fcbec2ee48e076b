"""Casting vocabulary: genders, skill tags, union/availability/travel values and numeric bounds."""
from __future__ import annotations

GENDERS = ("Man", "Woman", "Non-binary", "Other")

GENDER_ALIASES = {
    "Man": ["male", "man", "men", "guy", "guys", "dude", "boy", "boys", "gentleman"],
    "Woman": ["female", "woman", "women", "girl", "girls", "lady", "ladies", "chick", "gal"],
    "Non-binary": ["non-binary", "nonbinary", "nb", "they/them"],
    "Other": ["other", "transgender", "trans", "genderfluid"],
}

# Skill tags with the phrases that map onto them in free text
SKILL_ALIASES = {
    "fight": ["martial arts", "combat", "boxing", "karate", "mma", "wrestling", "fighting", "jiu-jitsu", "kickboxing", "taekwondo", "muay thai", "self-defense", "action"],
    "drive": ["driving", "motorcycle", "car", "vehicle", "racing", "drift", "precision driving", "chase scenes", "automotive"],
    "swim": ["water", "diving", "scuba", "underwater", "pool", "ocean", "lifeguard", "synchronized swimming", "aquatic"],
    "climb": ["climbing", "rope", "wall", "mountain", "rock climbing", "rappelling", "parkour", "free running", "scaling"],
    "horse": ["horse", "riding", "equestrian", "horseback", "mounted", "cavalry", "western"],
    "gun": ["gun", "firearm", "weapon", "tactical", "military", "police", "swat", "combat training", "weapons handling", "firearms"],
    "acrobat": ["acrobatics", "gymnastics", "tumbling", "flips", "aerial", "circus", "contortion", "flexibility"],
    "wire": ["wire work", "flying", "harness", "aerial stunts", "rigging", "suspended"],
    "fire": ["fire", "pyro", "pyrotechnics", "flame", "burn stunts", "fire safety", "explosions"],
    "bike": ["bicycle", "bmx", "mountain bike", "cycling", "bike stunts", "motorcycle"],
    "dance": ["dance", "choreography", "ballet", "hip hop", "contemporary", "ballroom", "pole dancing", "movement"],
    "ski": ["skiing", "snowboard", "winter sports", "ice skating", "hockey", "snow"],
}

SKILL_TAGS = tuple(SKILL_ALIASES.keys())

# Stored skill ids that also satisfy a requested tag
RELATED_SKILLS = {
    "fight": ["martial arts", "combat", "boxing", "karate", "mma", "wrestling", "jiu-jitsu", "kickboxing", "taekwondo", "muay thai", "self-defense", "action", "sword", "knife"],
    "gun": ["firearms", "weapon", "tactical", "military", "police", "swat", "combat training", "weapons handling", "shooting"],
    "drive": ["motorcycle", "car", "vehicle", "racing", "drift", "precision driving", "chase scenes", "automotive"],
    "swim": ["water", "diving", "scuba", "underwater", "pool", "ocean", "lifeguard", "synchronized swimming", "aquatic"],
    "climb": ["rope", "wall", "mountain", "rock climbing", "rappelling", "parkour", "free running", "scaling"],
    "horse": ["riding", "equestrian", "horseback", "mounted", "cavalry", "western"],
    "acrobat": ["gymnastics", "tumbling", "flips", "aerial", "circus", "contortion", "flexibility"],
    "dance": ["choreography", "ballet", "hip hop", "contemporary", "ballroom", "pole dancing", "movement"],
}

AVAILABILITY_VALUES = ("available", "busy", "unavailable")
UNION_STATUSES = ("SAG-AFTRA", "Non-union", "Unknown")
AGE_RANGES = ("18-25", "26-35", "36-45", "46+")

# Ascending reach: a performer willing to travel further also matches smaller requests
TRAVEL_RADIUS_ORDER = ("local", "50", "100", "200", "state", "regional", "national", "international")

TRAVEL_RADIUS_OPTIONS = [
    {"value": "local", "label": "Local only"},
    {"value": "50", "label": "Within 50 miles"},
    {"value": "100", "label": "Within 100 miles"},
    {"value": "200", "label": "Within 200 miles"},
    {"value": "state", "label": "Statewide"},
    {"value": "regional", "label": "Regional (multi-state)"},
    {"value": "national", "label": "National"},
    {"value": "international", "label": "International"},
]

HEIGHT_MIN_INCHES = 48
HEIGHT_MAX_INCHES = 96
WEIGHT_MIN_LBS = 80
WEIGHT_MAX_LBS = 400

SUBSCRIPTION_TIERS = ("free", "pro", "premium")


def format_height(total_inches: int) -> str:
    return f"{total_inches // 12}'{total_inches % 12}\""


def acceptable_travel_radii(requested: str) -> list[str]:
    """Radii at or above the requested one (inclusive)."""
    if requested not in TRAVEL_RADIUS_ORDER:
        return []
    return list(TRAVEL_RADIUS_ORDER[TRAVEL_RADIUS_ORDER.index(requested):])
