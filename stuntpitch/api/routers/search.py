# Purpose: filter-panel search (POST body or GET query string) and the filter vocabulary.
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.db.session import get_async_session
from stuntpitch.schemas.search import FiltersOut, SearchFilters, SearchRequest, SearchResponse
from stuntpitch.services.search import service as search_service

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResponse)
async def search(payload: SearchRequest, db: AsyncSession = Depends(get_async_session)):
    return await search_service.search_profiles(db, payload)


@router.get("/search", response_model=SearchResponse)
async def search_get(
    db: AsyncSession = Depends(get_async_session),
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort_by: Literal["relevance", "updated", "random"] = Query("updated", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    project_database_id: Optional[UUID] = Query(None, alias="projectDatabaseId"),
    location: Optional[str] = None,
    min_height: Optional[int] = Query(None, alias="minHeight", ge=0),
    max_height: Optional[int] = Query(None, alias="maxHeight", ge=0),
    min_weight: Optional[int] = Query(None, alias="minWeight", ge=0),
    max_weight: Optional[int] = Query(None, alias="maxWeight", ge=0),
    skills: Optional[str] = Query(None, description="Comma-separated skill ids"),
    union_status: Optional[str] = Query(None, alias="unionStatus"),
    availability_status: Optional[str] = Query(None, alias="availabilityStatus"),
    gender: Optional[str] = None,
    ethnicity: Optional[str] = None,
    travel_radius: Optional[str] = Query(None, alias="travelRadius"),
):
    filters = SearchFilters(
        location=location,
        min_height=min_height,
        max_height=max_height,
        min_weight=min_weight,
        max_weight=max_weight,
        skills=[s.strip() for s in (skills or "").split(",") if s.strip()],
        union_status=union_status,
        availability_status=availability_status,
        gender=gender,
        ethnicity=ethnicity,
        travel_radius=travel_radius,
    )
    request = SearchRequest(
        query=q,
        filters=filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        project_database_id=project_database_id,
    )
    return await search_service.search_profiles(db, request)


@router.get("/filters", response_model=FiltersOut)
def filters():
    return search_service.filter_options()
