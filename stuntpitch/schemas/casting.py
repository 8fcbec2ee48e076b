# stuntpitch/schemas/casting.py
"""Transient, per-request records passed between the casting pipeline stages."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stuntpitch.schemas.profile import ProfileRecord


class ParsedQuery(BaseModel):
    """Validated structured filters for a free-text casting request. Immutable."""
    model_config = ConfigDict(frozen=True)

    gender: Optional[str] = None
    location: Optional[str] = None
    ethnicities: Optional[tuple[str, ...]] = None
    height_min: Optional[int] = None
    height_max: Optional[int] = None
    weight_min: Optional[int] = None
    weight_max: Optional[int] = None
    skills: tuple[str, ...] = ()
    age_range: Optional[str] = None
    union_status: Optional[str] = None
    availability: Optional[str] = None
    travel_radius: Optional[str] = None
    broad_search: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @classmethod
    def empty(cls) -> "ParsedQuery":
        return cls()


class NameQuery(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_name_query: bool = False
    extracted_names: list[str] = Field(default_factory=list)
    query_type: Optional[Literal["contact_info", "general_info", "profile_lookup"]] = None
    confidence: float = 0.0


class IntentAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    intent: Literal["search", "conversation", "help", "greeting"]
    confidence: float = Field(ge=0.0, le=1.0)
    explanation: str = ""
    suggested_response: Optional[str] = None


class QueryResult(BaseModel):
    profiles: list[ProfileRecord] = Field(default_factory=list)
    total_matched: int = 0
    method: Literal["structured", "fallback", "vector"] = "structured"
    filters_applied: list[str] = Field(default_factory=list)


class ResumeAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    profile_id: str
    full_name: str
    tier: str = "free"
    relevant_experience: list[str] = Field(default_factory=list)
    notable_credits: list[str] = Field(default_factory=list)
    years_experience: float = 0
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    skills_from_resume: list[str] = Field(default_factory=list)
    analyzed: bool = False
    reason: Optional[str] = None


class SearchStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    method: str
    total_found: int
    filters_applied: list[str] = Field(default_factory=list)
    confidence: float = 0.0


class CastingResponse(BaseModel):
    response: str
    profile_ids: list[str] = Field(default_factory=list)
    search_stats: SearchStats


class ConversationalResponse(BaseModel):
    response: str
    should_transition_to_search: bool = False
