# stuntpitch/schemas/chat.py
"""Wire models for POST /api/chat (camelCase on the wire)."""
from __future__ import annotations

from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stuntpitch.schemas.casting import IntentAnalysis, NameQuery, ParsedQuery, ResumeAnalysis
from stuntpitch.schemas.profile import ProfileRecord


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=4000)
    conversation_history: list[ChatMessage] = Field(default_factory=list)
    project_database_id: Optional[UUID] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    response: str
    profiles: list[ProfileRecord] = Field(default_factory=list)
    conversation_history: list[ChatMessage] = Field(default_factory=list)
    search_stats: Optional[dict[str, Any]] = None
    parsed_query: Optional[ParsedQuery] = None
    intent_analysis: Optional[IntentAnalysis] = None
    name_query: Optional[NameQuery] = None
    resume_insights: Optional[list[ResumeAnalysis]] = None
    should_transition_to_search: Optional[bool] = None
    pipeline: str
