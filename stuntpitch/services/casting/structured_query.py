# stuntpitch/services/casting/structured_query.py
"""ParsedQuery -> SQL over `profiles`, ranked by profile completeness.

Height is stored as separate feet / inches columns, so a bound on total inches
becomes "feet past the boundary, or feet on it and inches within it".
"""
from __future__ import annotations

import logging
import random
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.constants.casting import (
    HEIGHT_MAX_INCHES,
    HEIGHT_MIN_INCHES,
    RELATED_SKILLS,
    WEIGHT_MAX_LBS,
    WEIGHT_MIN_LBS,
    acceptable_travel_radii,
    format_height,
)
from stuntpitch.models.profile import Profile, ProfileSkill
from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import ParsedQuery, QueryResult
from stuntpitch.schemas.profile import ProfileRecord

logger = logging.getLogger("casting.structured_query")

HEIGHT_FLEX_INCHES = 3
WEIGHT_FLEX_LBS = 10
BROAD_LIMIT = 100
DEFAULT_LIMIT = 50
FALLBACK_LIMIT = 20


def height_at_least(total_inches: int):
    feet, inches = divmod(total_inches, 12)
    return or_(
        Profile.height_feet > feet,
        and_(Profile.height_feet == feet, func.coalesce(Profile.height_inches, 0) >= inches),
    )


def height_at_most(total_inches: int):
    feet, inches = divmod(total_inches, 12)
    return or_(
        Profile.height_feet < feet,
        and_(Profile.height_feet == feet, func.coalesce(Profile.height_inches, 0) <= inches),
    )


def skill_terms(tag: str) -> list[str]:
    return [tag, *RELATED_SKILLS.get(tag, [])]


def has_any_skill(tags: Sequence[str]):
    """EXISTS a profile_skills row whose skill_id contains a requested tag or a related term."""
    terms = [t for tag in tags for t in skill_terms(tag)]
    return exists(
        select(ProfileSkill.id).where(
            ProfileSkill.profile_id == Profile.id,
            or_(*[ProfileSkill.skill_id.ilike(f"%{t}%") for t in terms]),
        )
    )


def build_profile_query(
    parsed: ParsedQuery,
    profile_ids: Optional[Sequence[UUID]] = None,
) -> tuple[Select, list[str]]:
    """Pure: the SELECT for `parsed` plus human-readable labels for each filter applied."""
    stmt = select(Profile).where(Profile.is_public.is_(True))
    applied: list[str] = []

    if profile_ids is not None:
        stmt = stmt.where(Profile.id.in_(list(profile_ids)))
        applied.append("project_database")

    if parsed.gender:
        stmt = stmt.where(Profile.gender == parsed.gender)
        applied.append(f"gender: {parsed.gender}")

    if parsed.location:
        location_match = [
            Profile.primary_location_structured == parsed.location,
            Profile.secondary_location_structured == parsed.location,
        ]
        if parsed.broad_search:
            city = parsed.location.split("-")[0]
            location_match.append(Profile.location.ilike(f"%{city}%"))
            applied.append(f"location: {parsed.location} (broad search)")
        else:
            applied.append(f"location: {parsed.location}")
        stmt = stmt.where(or_(*location_match))

    if parsed.ethnicities:
        stmt = stmt.where(Profile.ethnicity.in_(list(parsed.ethnicities)))
        applied.append(f"ethnicities: {', '.join(parsed.ethnicities)}")

    if parsed.height_min is not None or parsed.height_max is not None:
        if parsed.height_min is not None:
            stmt = stmt.where(height_at_least(max(HEIGHT_MIN_INCHES, parsed.height_min - HEIGHT_FLEX_INCHES)))
        if parsed.height_max is not None:
            stmt = stmt.where(height_at_most(min(HEIGHT_MAX_INCHES, parsed.height_max + HEIGHT_FLEX_INCHES)))
        lo = format_height(parsed.height_min) if parsed.height_min is not None else "any"
        hi = format_height(parsed.height_max) if parsed.height_max is not None else "any"
        applied.append(f"height: {lo} - {hi} (±{HEIGHT_FLEX_INCHES}\" flex)")

    if parsed.weight_min is not None or parsed.weight_max is not None:
        if parsed.weight_min is not None:
            stmt = stmt.where(Profile.weight_lbs >= max(WEIGHT_MIN_LBS, parsed.weight_min - WEIGHT_FLEX_LBS))
        if parsed.weight_max is not None:
            stmt = stmt.where(Profile.weight_lbs <= min(WEIGHT_MAX_LBS, parsed.weight_max + WEIGHT_FLEX_LBS))
        lo = parsed.weight_min if parsed.weight_min is not None else "any"
        hi = parsed.weight_max if parsed.weight_max is not None else "any"
        applied.append(f"weight: {lo}-{hi} lbs (±{WEIGHT_FLEX_LBS} flex)")

    if parsed.availability:
        stmt = stmt.where(Profile.availability_status == parsed.availability)
        applied.append(f"availability: {parsed.availability}")

    if parsed.union_status == "SAG-AFTRA":
        stmt = stmt.where(Profile.union_status.ilike("%SAG%"))
        applied.append("union: SAG-AFTRA")
    elif parsed.union_status == "Non-union":
        stmt = stmt.where(or_(Profile.union_status.ilike("%non-union%"), Profile.union_status.is_(None)))
        applied.append("union: Non-union")

    if parsed.travel_radius and parsed.travel_radius != "local":
        stmt = stmt.where(Profile.travel_radius.in_(acceptable_travel_radii(parsed.travel_radius)))
        applied.append(f"travel: {parsed.travel_radius}+")

    if parsed.skills:
        stmt = stmt.where(has_any_skill(parsed.skills))
        applied.append(f"skills: {', '.join(parsed.skills)} (with related skills)")

    stmt = stmt.limit(BROAD_LIMIT if parsed.broad_search else DEFAULT_LIMIT)
    return profile_repo.with_relations(stmt), applied


def profile_completeness(profile: ProfileRecord) -> int:
    score = 0
    if profile.full_name:
        score += 1
    if profile.bio:
        score += 2
    if profile.email:
        score += 1
    if profile.phone:
        score += 1
    if profile.height_feet and profile.height_inches is not None:
        score += 1
    if profile.weight_lbs:
        score += 1
    if profile.hair_color:
        score += 1
    if profile.ethnicity:
        score += 1
    if profile.union_status:
        score += 1
    if profile.availability_status:
        score += 1
    if profile.primary_location_structured or profile.location:
        score += 2
    if profile.profile_skills:
        score += 3
    if profile.profile_certifications:
        score += 2
    if profile.profile_photos:
        score += 3
    if profile.reel_url:
        score += 2
    if profile.website:
        score += 1
    if profile.resume_url:
        score += 2
    return score


def rank_by_completeness(profiles: Sequence[ProfileRecord], rng: Optional[random.Random] = None) -> list[ProfileRecord]:
    """Most complete first; equal scores are shuffled so the same performers don't always lead."""
    rng = rng or random.Random()
    keyed = [(-profile_completeness(p), rng.random(), p) for p in profiles]
    keyed.sort(key=lambda t: (t[0], t[1]))
    return [p for _, _, p in keyed]


async def query_with_structured_filters(
    session: AsyncSession,
    parsed: ParsedQuery,
    project_id: Optional[UUID] = None,
    *,
    rng: Optional[random.Random] = None,
) -> QueryResult:
    logger.info("Structured query with filters: %s", parsed.model_dump(exclude_defaults=True))
    try:
        profile_ids = None
        if project_id is not None:
            profile_ids = await profile_repo.submitted_profile_ids(session, project_id)
            if not profile_ids:
                logger.info("Project %s has no submissions; skipping profile query", project_id)
                return QueryResult(profiles=[], total_matched=0, method="structured", filters_applied=["project_database"])

        stmt, applied = build_profile_query(parsed, profile_ids)
        rows = (await session.execute(stmt)).scalars().all()
        records = rank_by_completeness([ProfileRecord.from_orm_profile(p) for p in rows], rng)
        logger.info("Structured query returned %d profiles; filters: %s", len(records), applied)
        return QueryResult(profiles=records, total_matched=len(records), method="structured", filters_applied=applied)
    except Exception as e:
        logger.exception("Structured query failed, running fallback: %s", e)
        await session.rollback()
        rows = await profile_repo.public_profiles(session, limit=FALLBACK_LIMIT)
        records = [ProfileRecord.from_orm_profile(p) for p in rows]
        return QueryResult(
            profiles=records,
            total_matched=len(records),
            method="fallback",
            filters_applied=["fallback - no filters applied"],
        )
