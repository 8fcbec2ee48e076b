# stuntpitch/services/casting/query_parser.py
"""Free-text casting request -> validated ParsedQuery.

The model only ever sees (and is told to emit) the allow-listed tokens from
stuntpitch.constants; `validate_parsed_query` re-checks every field anyway, so no
free text reaches the SQL builder.
"""
from __future__ import annotations

import asyncio
import logging
import math
from functools import partial
from typing import Any, Dict, Mapping, Optional

from stuntpitch.constants.casting import (
    AGE_RANGES,
    AVAILABILITY_VALUES,
    GENDER_ALIASES,
    GENDERS,
    HEIGHT_MAX_INCHES,
    HEIGHT_MIN_INCHES,
    SKILL_ALIASES,
    SKILL_TAGS,
    TRAVEL_RADIUS_OPTIONS,
    UNION_STATUSES,
    WEIGHT_MAX_LBS,
    WEIGHT_MIN_LBS,
)
from stuntpitch.constants.ethnicity import ETHNICITY_ALIASES, ETHNICITY_VALUES
from stuntpitch.constants.locations import ALL_LOCATIONS, LOCATION_VALUES
from stuntpitch.schemas.casting import ParsedQuery
from stuntpitch.services.common.llm_client import default_llm_client, load_prompt

logger = logging.getLogger("casting.query_parser")

QUERY_PARSER_PROMPT = load_prompt("casting/query_parser.prompt.txt")


def _mapping_lines(aliases: Mapping[str, list]) -> str:
    return "\n".join(f'- "{value}" (for: {", ".join(terms)})' for value, terms in aliases.items())


def build_parser_prompt(user_message: str) -> str:
    locations = "\n".join(
        f'- {loc.value}: "{loc.label}" (aliases: {", ".join(loc.aliases)})' for loc in ALL_LOCATIONS
    )
    travel = "\n".join(f'- "{opt["value"]}" (for: {opt["label"].lower()})' for opt in TRAVEL_RADIUS_OPTIONS)
    return QUERY_PARSER_PROMPT.format(
        gender_mappings=_mapping_lines(GENDER_ALIASES),
        location_mappings=locations,
        ethnic_mappings=_mapping_lines(ETHNICITY_ALIASES),
        skill_mappings=_mapping_lines(SKILL_ALIASES),
        travel_mappings=travel,
        user_message=user_message,
    )


def _enum(raw: Mapping[str, Any], key: str, allowed, label: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or value == "" or value == "null":
        return None
    if not isinstance(value, str) or value not in allowed:
        logger.info("Invalid %s '%s', setting to null", label, value)
        return None
    return value


def _bounded(raw: Mapping[str, Any], key: str, lo: int, hi: int) -> Optional[int]:
    value = raw.get(key)
    if value is None or value == "null":
        return None
    if isinstance(value, bool):
        logger.info("Invalid %s '%s', setting to null", key, value)
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.info("Invalid %s '%s', setting to null", key, value)
        return None
    if not math.isfinite(number) or number < lo or number > hi:
        logger.info("Invalid %s '%s', setting to null", key, value)
        return None
    return int(round(number))


def validate_parsed_query(raw: Mapping[str, Any]) -> ParsedQuery:
    """Null out (and log) every value that is not in its allow-list or numeric range."""
    if not isinstance(raw, Mapping):
        logger.info("Parsed query is not an object (%r); using empty query", raw)
        return ParsedQuery.empty()

    ethnicities = raw.get("ethnicities")
    if isinstance(ethnicities, str):
        ethnicities = [ethnicities]
    valid_ethnicities: list[str] = []
    if not isinstance(ethnicities, (list, tuple)):
        ethnicities = []
    for e in ethnicities:
        if isinstance(e, str) and e in ETHNICITY_VALUES:
            if e not in valid_ethnicities:
                valid_ethnicities.append(e)
        else:
            logger.info("Invalid ethnicity '%s', removing from list", e)

    skills = raw.get("skills")
    if isinstance(skills, str):
        skills = [skills]
    valid_skills: list[str] = []
    invalid_skills: list[str] = []
    if not isinstance(skills, (list, tuple)):
        skills = []
    for s in skills:
        if isinstance(s, str) and s in SKILL_TAGS:
            if s not in valid_skills:
                valid_skills.append(s)
        else:
            invalid_skills.append(str(s))
    if invalid_skills:
        logger.info("Invalid skills '%s', removed from list", ", ".join(invalid_skills))

    try:
        confidence = float(raw.get("confidence") or 0.0)
    except (TypeError, ValueError):
        confidence = 0.0
    if not math.isfinite(confidence):
        confidence = 0.0
    confidence = min(1.0, max(0.0, confidence))

    broad_search = raw.get("broad_search", False)
    if not isinstance(broad_search, bool):
        logger.info("Invalid broad_search '%s', setting to false", broad_search)
        broad_search = False

    parsed = ParsedQuery(
        gender=_enum(raw, "gender", GENDERS, "gender"),
        location=_enum(raw, "location", LOCATION_VALUES, "location"),
        ethnicities=tuple(valid_ethnicities) or None,
        height_min=_bounded(raw, "height_min", HEIGHT_MIN_INCHES, HEIGHT_MAX_INCHES),
        height_max=_bounded(raw, "height_max", HEIGHT_MIN_INCHES, HEIGHT_MAX_INCHES),
        weight_min=_bounded(raw, "weight_min", WEIGHT_MIN_LBS, WEIGHT_MAX_LBS),
        weight_max=_bounded(raw, "weight_max", WEIGHT_MIN_LBS, WEIGHT_MAX_LBS),
        skills=tuple(valid_skills),
        age_range=_enum(raw, "age_range", AGE_RANGES, "age range"),
        union_status=_enum(raw, "union_status", UNION_STATUSES, "union status"),
        availability=_enum(raw, "availability", AVAILABILITY_VALUES, "availability"),
        travel_radius=_enum(raw, "travel_radius", [o["value"] for o in TRAVEL_RADIUS_OPTIONS], "travel radius"),
        broad_search=broad_search,
        confidence=confidence,
    )
    logger.debug("Validated parsed query: %s", parsed)
    return parsed


async def parse_user_query(user_message: str, llm: Optional[Any] = None) -> ParsedQuery:
    """Ask the model for structured filters, then validate. Any failure yields an empty query."""
    llm = llm or default_llm_client
    messages = [{"role": "user", "content": build_parser_prompt(user_message)}]
    try:
        loop = asyncio.get_running_loop()
        res = await loop.run_in_executor(None, partial(llm.chat_json, messages, timeout=60, max_tokens=300))
        data: Dict[str, Any] = res.data
        if "__llm_error__" in data:
            logger.warning("Query parser LLM error: %s", data["__llm_error__"])
            return ParsedQuery.empty()
        logger.info("Raw parsed query: %s", data)
        return validate_parsed_query(data)
    except Exception as e:
        logger.exception("Query parsing error: %s", e)
        return ParsedQuery.empty()
