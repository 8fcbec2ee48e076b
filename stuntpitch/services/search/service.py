# stuntpitch/services/search/service.py
"""Filter-panel search over public profiles (no AI): text query, explicit filters,
optional project scope, pagination and sort. Every search is logged best-effort."""
from __future__ import annotations

import logging
import math
from typing import Optional

from sqlalchemy import Select, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.constants.casting import (
    AVAILABILITY_VALUES,
    GENDERS,
    SKILL_TAGS,
    TRAVEL_RADIUS_OPTIONS,
    UNION_STATUSES,
    acceptable_travel_radii,
)
from stuntpitch.constants.ethnicity import ETHNIC_APPEARANCE_OPTIONS
from stuntpitch.constants.locations import ALL_LOCATIONS, find_location_by_alias, find_location_by_value
from stuntpitch.models.profile import Profile, ProfileSkill
from stuntpitch.repositories import profile_repo, search_log_repo
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.schemas.search import FilterOption, FiltersOut, SearchFilters, SearchRequest, SearchResponse
from stuntpitch.services.casting.structured_query import has_any_skill, height_at_least, height_at_most

logger = logging.getLogger("search.service")


def _skill_predicate(skills: list[str]):
    tags = [s for s in skills if s in SKILL_TAGS]
    free = [s for s in skills if s not in SKILL_TAGS]
    clauses = []
    if tags:
        clauses.append(has_any_skill(tags))
    if free:
        clauses.append(exists(
            select(ProfileSkill.id).where(
                ProfileSkill.profile_id == Profile.id,
                or_(*[ProfileSkill.skill_id.ilike(f"%{s}%") for s in free]),
            )
        ))
    return or_(*clauses)


def apply_filters(stmt: Select, query: Optional[str], filters: SearchFilters) -> Select:
    if query:
        like = f"%{query}%"
        stmt = stmt.where(or_(Profile.full_name.ilike(like), Profile.bio.ilike(like), Profile.location.ilike(like)))
    if filters.gender:
        stmt = stmt.where(Profile.gender == filters.gender)
    if filters.ethnicity:
        stmt = stmt.where(Profile.ethnicity == filters.ethnicity)
    if filters.location:
        known = find_location_by_value(filters.location) or find_location_by_alias(filters.location)
        code = known.value if known else filters.location
        stmt = stmt.where(or_(
            Profile.location.ilike(f"%{filters.location}%"),
            Profile.primary_location_structured == code,
            Profile.secondary_location_structured == code,
        ))
    if filters.union_status:
        stmt = stmt.where(Profile.union_status == filters.union_status)
    if filters.availability_status:
        stmt = stmt.where(Profile.availability_status == filters.availability_status)
    if filters.min_weight:
        stmt = stmt.where(Profile.weight_lbs >= filters.min_weight)
    if filters.max_weight:
        stmt = stmt.where(Profile.weight_lbs <= filters.max_weight)
    if filters.min_height:
        stmt = stmt.where(height_at_least(filters.min_height))
    if filters.max_height:
        stmt = stmt.where(height_at_most(filters.max_height))
    if filters.skills:
        stmt = stmt.where(_skill_predicate(filters.skills))
    if filters.travel_radius and filters.travel_radius != "local":
        radii = acceptable_travel_radii(filters.travel_radius)
        if radii:
            stmt = stmt.where(Profile.travel_radius.in_(radii))
    return stmt


async def search_profiles(session: AsyncSession, request: SearchRequest) -> SearchResponse:
    page, limit = request.page, request.limit
    stmt = select(Profile).where(Profile.is_public.is_(True))

    if request.project_database_id is not None:
        ids = await profile_repo.submitted_profile_ids(session, request.project_database_id)
        if not ids:
            logger.info("Project %s has no submissions; empty search result", request.project_database_id)
            return SearchResponse(profiles=[], total=0, page=page, limit=limit, total_pages=0)
        stmt = stmt.where(Profile.id.in_(ids))

    stmt = apply_filters(stmt, request.query, request.filters)

    total = (await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    if request.sort_by == "random":
        stmt = stmt.order_by(func.random())
    elif request.sort_order == "asc":
        stmt = stmt.order_by(Profile.updated_at.asc())
    else:
        stmt = stmt.order_by(Profile.updated_at.desc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)

    rows = (await session.execute(profile_repo.with_relations(stmt))).scalars().all()
    profiles = [ProfileRecord.from_orm_profile(p) for p in rows]
    logger.info("Filter search: %d/%d profiles (page %d)", len(profiles), total, page)

    if request.query or not request.filters.is_empty():
        await log_search_safely(session, request, total)

    return SearchResponse(
        profiles=profiles,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


async def log_search_safely(session: AsyncSession, request: SearchRequest, total: int) -> None:
    try:
        await search_log_repo.log_search(
            session,
            query=request.query,
            filters=request.filters.model_dump(by_alias=True, exclude_defaults=True),
            results_count=total,
        )
    except Exception as e:
        logger.warning("Error logging search: %s", e)
        await session.rollback()


def filter_options() -> FiltersOut:
    return FiltersOut(
        locations=[FilterOption(value=loc.value, label=loc.label) for loc in ALL_LOCATIONS],
        ethnicities=[FilterOption(**opt) for opt in ETHNIC_APPEARANCE_OPTIONS],
        genders=list(GENDERS),
        skills=list(SKILL_TAGS),
        union_statuses=list(UNION_STATUSES),
        availability=list(AVAILABILITY_VALUES),
        travel_radius=[FilterOption(**opt) for opt in TRAVEL_RADIUS_OPTIONS],
    )
