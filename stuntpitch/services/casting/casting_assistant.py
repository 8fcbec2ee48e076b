# stuntpitch/services/casting/casting_assistant.py
"""Narrate a search result and pick which performers to put in front of the user.

The model answers in JSON ({response, profile_ids}); the legacy text mode ends the
reply with a `[PROFILES: id1,id2]` marker instead. Either way the chosen ids are
restricted to the candidates, and the first three candidates are used when none survive.
"""
from __future__ import annotations

import asyncio
import logging
import re
from functools import partial
from typing import Any, Optional, Sequence

from stuntpitch.constants.casting import format_height
from stuntpitch.constants.ethnicity import ethnicity_label
from stuntpitch.constants.locations import location_label
from stuntpitch.schemas.casting import CastingResponse, ParsedQuery, QueryResult, ResumeAnalysis, SearchStats
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.services.common.llm_client import default_llm_client, format_history, load_prompt

logger = logging.getLogger("casting.assistant")

CASTING_PROMPT = load_prompt("casting/casting_assistant.prompt.txt")
OUTPUT_JSON = load_prompt("casting/output_json.prompt.txt")
OUTPUT_SENTINEL = load_prompt("casting/output_sentinel.prompt.txt")

SENTINEL_RE = re.compile(r"\[PROFILES:\s*(.*?)\]", re.IGNORECASE | re.DOTALL)
FALLBACK_COUNT = 3
BIO_SNIPPET_CHARS = 300
HISTORY_TURNS = 3


def extract_profile_sentinel(text: str, candidates: Sequence[ProfileRecord] = ()) -> tuple[str, list[str]]:
    """Strip every `[PROFILES: ...]` marker from `text`; return (clean text, ids in order).

    With no ids in the text, falls back to the first three candidates.
    """
    ids: list[str] = []
    for match in SENTINEL_RE.finditer(text or ""):
        for raw in match.group(1).split(","):
            pid = raw.strip()
            if pid and pid not in ids:
                ids.append(pid)
    clean = SENTINEL_RE.sub("", text or "").strip()
    if not ids and candidates:
        logger.info("No profile marker in response; using first %d results", FALLBACK_COUNT)
        ids = [p.id for p in candidates[:FALLBACK_COUNT]]
    return clean, ids


def build_search_context(parsed: ParsedQuery, result: QueryResult) -> str:
    lines = [
        f"Search Method: {result.method}",
        f"Performers Found: {result.total_matched}",
        f"Parse Confidence: {parsed.confidence * 100:.0f}%",
    ]
    if result.filters_applied:
        lines.append(f"Filters Applied: {', '.join(result.filters_applied)}")

    criteria = []
    if parsed.gender:
        criteria.append(f"Gender: {parsed.gender}")
    if parsed.location:
        criteria.append(f"Location: {location_label(parsed.location)}")
    if parsed.ethnicities:
        criteria.append(f"Ethnicities: {', '.join(parsed.ethnicities)}")
    if parsed.height_min is not None and parsed.height_max is not None:
        criteria.append(f"Height Range: {format_height(parsed.height_min)} - {format_height(parsed.height_max)}")
    if parsed.skills:
        criteria.append(f"Skills: {', '.join(parsed.skills)}")
    if parsed.union_status:
        criteria.append(f"Union: {parsed.union_status}")
    if parsed.availability:
        criteria.append(f"Availability: {parsed.availability}")
    if criteria:
        lines.append(f"Interpreted Criteria: {' | '.join(criteria)}")
    return "\n".join(lines)


def _profile_block(profile: ProfileRecord, resume: Optional[ResumeAnalysis]) -> str:
    primary = location_label(profile.primary_location_structured) or profile.location or "Location not specified"
    secondary = location_label(profile.secondary_location_structured) or profile.secondary_location
    total = profile.height_total_inches
    skills = ", ".join(
        s.skill_id
        + (f" ({s.proficiency_level})" if s.proficiency_level else "")
        + (f" - {s.years_experience} years" if s.years_experience else "")
        for s in profile.profile_skills
    ) or "No skills listed"
    certs = ", ".join(
        c.certification_id + (f" ({c.date_obtained})" if c.date_obtained else "")
        for c in profile.profile_certifications
    ) or "No certifications listed"

    lines = [
        f"ID: {profile.id}",
        f"Name: {profile.full_name}",
        f"Gender: {profile.gender or 'Not specified'}",
        f"Primary Location: {primary}",
    ]
    if secondary:
        lines.append(f"Secondary Location: {secondary}")
    lines += [
        f"Height: {format_height(total) if total is not None else 'Height not specified'}",
        f"Weight: {f'{profile.weight_lbs} lbs' if profile.weight_lbs else 'Weight not specified'}",
        f"Ethnicity: {ethnicity_label(profile.ethnicity) or 'Not specified'}",
        f"Hair: {profile.hair_color or 'Not specified'}",
        f"Union Status: {profile.union_status or 'Not specified'}",
        f"Availability: {profile.availability_status or 'Not specified'}",
        f"Travel: {profile.travel_radius or 'local'}",
        f"Skills: {skills}",
        f"Certifications: {certs}",
    ]
    if profile.bio:
        lines.append(f"Bio: {profile.bio[:BIO_SNIPPET_CHARS]}")
    if profile.reel_url:
        lines.append("Demo Reel: Available")
    if profile.resume_url:
        lines.append("Resume: Available")

    if resume is not None and resume.analyzed:
        lines.append(f"RESUME HIGHLIGHTS ({resume.tier.upper()} TIER):")
        if resume.relevant_experience:
            lines.append(f"  Relevant Experience: {', '.join(resume.relevant_experience)}")
        if resume.notable_credits:
            lines.append(f"  Notable Credits: {', '.join(resume.notable_credits)}")
        if resume.years_experience > 0:
            lines.append(f"  Total Experience: {resume.years_experience:g} years")
        if resume.skills_from_resume:
            lines.append(f"  Skills from Resume: {', '.join(resume.skills_from_resume)}")
        lines.append(f"  Relevance Score: {resume.relevance_score * 100:.0f}%")
    elif resume is not None and resume.reason:
        lines.append(f"Resume Analysis: {resume.reason}")
    return "\n".join(lines) + "\n---"


def build_performer_profiles(profiles: Sequence[ProfileRecord], analyses: Sequence[ResumeAnalysis] = ()) -> str:
    if not profiles:
        return "No performers found matching the specified criteria."
    by_id = {a.profile_id: a for a in analyses}
    return "\n\n".join(_profile_block(p, by_id.get(p.id)) for p in profiles)


def _build_messages(message, parsed, result, history, analyses, structured: bool) -> list[dict]:
    if history:
        request_context = (
            f"\nCONVERSATION CONTEXT:\n{format_history(history, HISTORY_TURNS)}\n\nCURRENT REQUEST: \"{message}\""
        )
    else:
        request_context = f"\nFIRST REQUEST: \"{message}\""
    prompt = CASTING_PROMPT.format(
        request_context=request_context,
        search_context=build_search_context(parsed, result),
        total_matched=result.total_matched,
        performer_profiles=build_performer_profiles(result.profiles, analyses),
        output_format=OUTPUT_JSON if structured else OUTPUT_SENTINEL,
    )
    return [{"role": "user", "content": prompt}]


def _select_ids(ids: Sequence[Any], candidates: Sequence[ProfileRecord]) -> list[str]:
    """Keep ids that belong to the candidate set, de-duplicated; first three candidates if none do."""
    known = {p.id for p in candidates}
    selected: list[str] = []
    for raw in ids:
        pid = str(raw).strip()
        if pid in known and pid not in selected:
            selected.append(pid)
        elif pid and pid not in known:
            logger.info("Dropping unknown profile id from model output: %s", pid)
    if not selected:
        selected = [p.id for p in candidates[:FALLBACK_COUNT]]
    return selected


def _fallback_text(result: QueryResult) -> str:
    if result.profiles:
        return f"I found {len(result.profiles)} performer(s) that could work for your project!"
    return "No exact matches found. Try expanding your search criteria for more options."


async def generate_casting_response(
    message: str,
    parsed: ParsedQuery,
    result: QueryResult,
    history: Sequence[Any] = (),
    analyses: Sequence[ResumeAnalysis] = (),
    *,
    llm: Any = None,
    structured: bool = True,
) -> CastingResponse:
    llm = llm or default_llm_client
    stats = SearchStats(
        method=result.method,
        total_found=result.total_matched,
        filters_applied=list(result.filters_applied),
        confidence=parsed.confidence,
    )
    messages = _build_messages(message, parsed, result, history, analyses, structured)
    loop = asyncio.get_running_loop()

    if structured:
        res = await loop.run_in_executor(None, partial(llm.chat_json, messages, timeout=90, max_tokens=900))
        data = res.data
        text = data.get("response") if isinstance(data.get("response"), str) else None
        if "__llm_error__" in data or not text:
            logger.warning("Casting assistant JSON failed (%s); using fallback response", data.get("__llm_error__", "no response"))
            return CastingResponse(
                response=_fallback_text(result),
                profile_ids=[p.id for p in result.profiles[:FALLBACK_COUNT]],
                search_stats=stats,
            )
        clean, stray_ids = extract_profile_sentinel(text)
        raw_ids = data.get("profile_ids") or data.get("profileIds") or []
        if not isinstance(raw_ids, list):
            raw_ids = [raw_ids]
        ids = _select_ids([*raw_ids, *stray_ids], result.profiles)
    else:
        try:
            text = await loop.run_in_executor(None, partial(llm.chat_text, messages, timeout=90, max_tokens=600))
        except Exception as e:
            logger.error("Casting assistant error: %s", e)
            return CastingResponse(
                response=_fallback_text(result),
                profile_ids=[p.id for p in result.profiles[:FALLBACK_COUNT]],
                search_stats=stats,
            )
        clean, raw_ids = extract_profile_sentinel(text, result.profiles)
        ids = _select_ids(raw_ids, result.profiles)

    logger.info("Casting assistant selected %d profile ids", len(ids))
    return CastingResponse(response=clean, profile_ids=ids, search_stats=stats)
