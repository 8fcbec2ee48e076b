# stuntpitch/schemas/search.py
from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stuntpitch.schemas.profile import ProfileRecord


class SearchFilters(BaseModel):
    """Explicit filter-panel values (camelCase on the wire, like the query string)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    location: Optional[str] = None
    min_height: Optional[int] = Field(None, ge=0)
    max_height: Optional[int] = Field(None, ge=0)
    min_weight: Optional[int] = Field(None, ge=0)
    max_weight: Optional[int] = Field(None, ge=0)
    skills: list[str] = Field(default_factory=list)
    union_status: Optional[str] = None
    availability_status: Optional[str] = None
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    travel_radius: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(v for v in self.model_dump().values())


class SearchRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: Optional[str] = None
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1, le=100)
    sort_by: Literal["relevance", "updated", "random"] = "relevance"
    sort_order: Literal["asc", "desc"] = "desc"
    project_database_id: Optional[UUID] = None


class SearchResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    profiles: list[ProfileRecord]
    total: int
    page: int
    limit: int
    total_pages: int


class FilterOption(BaseModel):
    value: str
    label: str


class FiltersOut(BaseModel):
    locations: list[FilterOption]
    ethnicities: list[FilterOption]
    genders: list[str]
    skills: list[str]
    union_statuses: list[str]
    availability: list[str]
    travel_radius: list[FilterOption]
