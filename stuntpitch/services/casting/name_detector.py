# stuntpitch/services/casting/name_detector.py
"""Fast path for "who is X" style messages: spot a person's name without an LLM call,
look the performer up by name, and answer with a canned reply."""
from __future__ import annotations

import logging
import re
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.constants.casting import GENDER_ALIASES, SKILL_ALIASES, SKILL_TAGS
from stuntpitch.constants.locations import ALL_LOCATIONS
from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import NameQuery
from stuntpitch.schemas.profile import ProfileRecord

logger = logging.getLogger("casting.name_detector")


def _vocab_words(phrases) -> set[str]:
    return {word for phrase in phrases for word in re.split(r"[^a-z]+", phrase.lower()) if word}


# Words that are never part of a person's name
NON_NAME_WORDS = frozenset({
    "performers", "performer", "people", "talent", "actors", "actor", "stunt", "stunts",
    "double", "doubles", "coordinator", "coordinators", "artist", "artists", "martial",
    "fighter", "fighters", "driver", "drivers", "swimmer", "swimmers", "climber", "climbers",
    "dancer", "dancers", "acrobats",
    "available", "looking", "need", "want", "find", "search", "show", "list",
    "tall", "short", "young", "old", "experienced", "professional",
}
    | _vocab_words(SKILL_TAGS)
    | _vocab_words(term for terms in SKILL_ALIASES.values() for term in terms)
    | _vocab_words(term for terms in GENDER_ALIASES.values() for term in terms)
)

# A run made only of these words names a market, not a person ("San Diego", "Las Vegas")
PLACE_WORDS = frozenset(
    _vocab_words(loc.label for loc in ALL_LOCATIONS)
    | _vocab_words(alias for loc in ALL_LOCATIONS for alias in loc.aliases)
    | _vocab_words(loc.value for loc in ALL_LOCATIONS)
)

COMMON_WORDS = NON_NAME_WORDS | {
    "what", "is", "the", "phone", "number", "email", "contact", "info", "for",
    "tell", "me", "about", "show", "find", "get", "who", "details", "profile",
    "can", "you", "please", "i", "need", "want", "looking", "search",
    "how", "where", "when", "why", "does", "have", "know", "like", "on",
    "resume", "cv", "experience", "work", "history", "background",
    "any", "some", "in", "near", "from", "at", "with", "and", "or",
}

CONTACT_KEYWORDS = ("phone", "email", "contact", "number", "reach", "call", "message",
                    "details", "info", "information", "profile")

# Ordered: earlier patterns win when several match
NAME_QUERY_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    r"what\s+is\s+([a-z\s]+?)['’]?s?\s+(phone|email|contact|number|info)",
    r"tell\s+me\s+about\s+([a-z\s]+)",
    r"show\s+me\s+([a-z\s]+?)['’]?s?\s+(profile|info|details)",
    r"find\s+([a-z\s]+?)['’]?s?\s+(profile|contact|info)",
    r"who\s+is\s+([a-z\s]+)",
    r"get\s+([a-z\s]+?)['’]?s?\s+(phone|email|contact|details)",
    r"contact\s+(info|details)?\s+for\s+([a-z\s]+)",
    r"([a-z\s]+?)['’]?s?\s+(phone|email|contact)\s+(number|info|details)",
    r"what\s+is\s+on\s+([a-z\s]+?)['’]?s?\s+(resume|cv)",
    r"([a-z\s]+?)['’]?s?\s+(resume|cv)",
    r"show\s+me\s+([a-z\s]+?)['’]?s?\s+(resume|cv|experience)",
    r"do\s+you\s+have\s+([a-z\s]+)\s+in\s+(your\s+)?(database|system)",
    r"is\s+([a-z\s]+)\s+in\s+(your\s+)?(database|system)",
    r"look\s+up\s+([a-z\s]+)",
    r"search\s+for\s+([a-z\s]+)",
    r"([a-z\s]+)\s+profile",
    r"what\s+(about|is|does)\s+([a-z\s]+?)\s+(do|have|know|like)",
    r"how\s+(is|does)\s+([a-z\s]+)",
    r"where\s+(is|does)\s+([a-z\s]+)",
)]

STANDALONE_NAME = re.compile(r"^([a-z]+\s+[a-z]+(?:\s+[a-z]+)*)$", re.IGNORECASE)
_NAME_CHARS = re.compile(r"^[a-z\s\-'.]+$", re.IGNORECASE)
_CAPITALIZED = re.compile(r"^[A-Z][a-z]+$")

NAME_QUERY_THRESHOLD = 0.6


def _not_a_name(candidate: str) -> bool:
    words = candidate.lower().split()
    if any(word in NON_NAME_WORDS for word in words):
        return True
    return bool(words) and all(word in PLACE_WORDS for word in words)


def _looks_like_name(candidate: str) -> bool:
    return (
        2 <= len(candidate) <= 50
        and bool(_NAME_CHARS.match(candidate))
        and not _not_a_name(candidate)
        and any(ch.isupper() for ch in candidate)
    )


def _standalone_name(message: str) -> Optional[str]:
    """A message that is nothing but two or more words, one of them capitalized."""
    match = STANDALONE_NAME.match(message.strip())
    if not match:
        return None
    candidate = match.group(1).strip()
    if len(candidate.split()) < 2 or _not_a_name(candidate):
        return None
    # all-lowercase input is too ambiguous to call a name
    if not any(ch.isupper() for ch in candidate):
        return None
    return candidate


def _capitalized_runs(message: str) -> list[str]:
    """Runs of two or more consecutive Capitalized words that are not common words or places."""
    names: list[str] = []
    run: list[str] = []

    def flush() -> None:
        candidate = " ".join(run)
        if len(run) >= 2 and len(candidate) >= 4 and not _not_a_name(candidate):
            names.append(candidate)

    for word in message.split():
        clean = re.sub(r"[^\w]", "", word)
        if len(clean) > 1 and _CAPITALIZED.match(clean) and clean.lower() not in COMMON_WORDS:
            run.append(clean)
            continue
        flush()
        run = []
    flush()
    return names


def detect_name_query(message: str) -> NameQuery:
    """Classify `message` as a lookup for a named performer. Pure and deterministic."""
    lower = message.lower()
    extracted: list[str] = []

    for pattern in NAME_QUERY_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        for group in match.groups():
            if not group:
                continue
            candidate = group.strip()
            if _looks_like_name(candidate) and candidate not in extracted:
                extracted.append(candidate)

    standalone = _standalone_name(message)
    if standalone and standalone not in extracted:
        extracted.append(standalone)

    if not extracted:
        extracted = _capitalized_runs(message)

    query_type = None
    confidence = 0.0
    if extracted:
        if any(k in lower for k in ("phone", "contact", "email")):
            query_type, confidence = "contact_info", 0.9
        elif any(k in lower for k in ("resume", "cv", "experience", "work", "history")):
            query_type, confidence = "general_info", 0.85
        elif any(k in lower for k in ("profile", "details", "info")):
            query_type, confidence = "general_info", 0.8
        else:
            query_type, confidence = "profile_lookup", 0.7

    result = NameQuery(
        is_name_query=bool(extracted) and confidence > NAME_QUERY_THRESHOLD,
        extracted_names=extracted,
        query_type=query_type,
        confidence=confidence,
    )
    logger.info(
        "Name detection: is_name_query=%s names=%s type=%s confidence=%.2f",
        result.is_name_query, extracted, query_type, confidence,
    )
    return result


async def search_profiles_by_name(
    session: AsyncSession,
    names: Sequence[str],
    project_id: Optional[UUID] = None,
) -> list[ProfileRecord]:
    """Public profiles whose full name matches any of `names` (at most 10)."""
    if not names:
        return []
    try:
        rows = await profile_repo.search_by_name(session, names, project_id=project_id, limit=10)
    except Exception as e:
        logger.exception("Name search failed: %s", e)
        return []
    logger.info("Found %d profiles matching names: %s", len(rows), ", ".join(names))
    return [ProfileRecord.from_orm_profile(p) for p in rows]


def _describe(profile: ProfileRecord) -> str:
    location = profile.primary_location_structured or profile.location or "Location not specified"
    skills = ", ".join(profile.skill_ids[:3])
    specialty = f" and specialize in {skills}" if skills else ""
    return (
        f"Here's {profile.full_name}! They're based in {location}{specialty}. "
        "Check out their full profile for more details, photos, and contact information."
    )


def _is_close_match(query_name: str, full_name: str) -> bool:
    profile_name = full_name.lower()
    if profile_name == query_name or query_name in profile_name:
        return True
    query_parts = query_name.split()
    profile_parts = profile_name.split()
    if len(query_parts) >= 2 and len(profile_parts) >= 2:
        return all(
            any(pp in qp or qp in pp for pp in profile_parts)
            for qp in query_parts
        )
    return False


def generate_name_based_response(
    message: str,
    name_query: NameQuery,
    profiles: Sequence[ProfileRecord],
) -> tuple[str, list[str]]:
    """Canned reply for a name lookup; returns (text, profile ids to show)."""
    if not profiles:
        wanted = " or ".join(name_query.extracted_names)
        return (
            f'I searched our performer database but couldn\'t find "{wanted}" in our system. '
            "This person doesn't appear to have a profile with us. Would you like me to help you "
            "search for performers with similar names or different criteria?",
            [],
        )

    if len(profiles) == 1:
        profile = profiles[0]
        if name_query.query_type == "contact_info":
            return (
                f"I found {profile.full_name}! For contact information and booking inquiries, please view "
                "their full profile where you can find their professional contact details and representation information.",
                [profile.id],
            )
        return _describe(profile), [profile.id]

    query_name = name_query.extracted_names[0].lower() if name_query.extracted_names else ""
    close = next((p for p in profiles if query_name and _is_close_match(query_name, p.full_name)), None)
    lower = message.lower()
    specific = (
        any(k in lower for k in ("resume", "profile", "info"))
        or len(query_name.split()) >= 2
        or len(message.strip().split()) <= 4
    )
    if close is not None and specific:
        return _describe(close), [close.id]

    names = ", ".join(p.full_name for p in profiles[:3])
    remaining = f" and {len(profiles) - 3} others" if len(profiles) > 3 else ""
    return (
        f"I found several performers: {names}{remaining}. Could you be more specific about which one you're looking for?",
        [p.id for p in profiles[:5]],
    )
