# stuntpitch/services/casting/pipeline.py
"""Chat pipeline: name fast path -> intent -> (search | conversation).

Search path:
1. Parse the message into a validated ParsedQuery
2. Run the structured query (vector fallback when nothing matches)
3. Analyze the resumes of the top matches
4. Let the casting assistant narrate and pick the profiles to foreground
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.core.config import settings
from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import NameQuery, QueryResult
from stuntpitch.schemas.chat import ChatMessage, ChatRequest, ChatResponse
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.services.casting import name_detector
from stuntpitch.services.casting.casting_assistant import generate_casting_response
from stuntpitch.services.casting.conversational_agent import generate_conversational_response
from stuntpitch.services.casting.intent_detector import detect_user_intent
from stuntpitch.services.casting.query_parser import parse_user_query
from stuntpitch.services.casting.resume_analyzer import (
    ResumeAnalysisConfig,
    analyze_eligible_resumes,
    summarize_resume_analyses,
)
from stuntpitch.services.casting.structured_query import query_with_structured_filters

logger = logging.getLogger("casting.pipeline")

HISTORY_KEEP = 4
VECTOR_LIMIT = 20


@dataclass(frozen=True)
class PipelineConfig:
    resume: ResumeAnalysisConfig = field(default_factory=ResumeAnalysisConfig)
    structured_output: bool = True
    use_vector_fallback: bool = True
    name_confidence: float = 0.6
    search_confidence: float = 0.6
    name_recheck_confidence: float = 0.5

    @classmethod
    def from_settings(cls) -> "PipelineConfig":
        return cls(
            resume=ResumeAnalysisConfig.from_settings(),
            structured_output=settings.CASTING_STRUCTURED_OUTPUT,
            use_vector_fallback=settings.USE_VECTOR_FALLBACK,
        )


def _history(previous: Sequence[ChatMessage], message: str, reply: str) -> list[ChatMessage]:
    return [
        *list(previous)[-HISTORY_KEEP:],
        ChatMessage(role="user", content=message),
        ChatMessage(role="assistant", content=reply),
    ]


def order_by_selection(profiles: Sequence[ProfileRecord], selected_ids: Sequence[str]) -> list[ProfileRecord]:
    """Selected profiles first in selection order, then the rest in their original order."""
    by_id = {p.id: p for p in profiles}
    chosen = [by_id[pid] for pid in selected_ids if pid in by_id]
    chosen_ids = {p.id for p in chosen}
    return chosen + [p for p in profiles if p.id not in chosen_ids]


class ChatPipeline:
    def __init__(self, config: PipelineConfig, llm: Any = None, embedder: Any = None):
        self.config = config
        self.llm = llm
        self.embedder = embedder

    async def handle(self, session: AsyncSession, request: ChatRequest) -> ChatResponse:
        message = request.message
        history = request.conversation_history
        project_id = request.project_database_id

        name_query = name_detector.detect_name_query(message)
        if name_query.is_name_query and name_query.confidence > self.config.name_confidence:
            return await self._name_lookup(session, request, name_query, "name-lookup-mode")

        intent = await detect_user_intent(message, history, llm=self.llm)

        if intent.intent == "search" and intent.confidence > self.config.search_confidence:
            recheck = name_detector.detect_name_query(message)
            if recheck.is_name_query and recheck.confidence > self.config.name_recheck_confidence:
                return await self._name_lookup(session, request, recheck, "search-to-name-lookup")

            parsed = await parse_user_query(message, llm=self.llm)
            result = await query_with_structured_filters(session, parsed, project_id)
            if result.total_matched == 0:
                result = await self._vector_fallback(session, message, project_id, result)

            top = result.profiles[: self.config.resume.max_profiles]
            analyses = await analyze_eligible_resumes(top, message, self.config.resume, llm=self.llm)

            casting = await generate_casting_response(
                message, parsed, result, history, analyses,
                llm=self.llm, structured=self.config.structured_output,
            )
            profiles = order_by_selection(result.profiles, casting.profile_ids)
            stats = casting.search_stats.model_dump(by_alias=True)
            stats["resumeAnalysis"] = summarize_resume_analyses(top, analyses, self.config.resume)

            logger.info(
                "Search pipeline done: method=%s found=%d selected=%d",
                result.method, result.total_matched, len(casting.profile_ids),
            )
            return ChatResponse(
                response=casting.response,
                profiles=profiles,
                conversation_history=_history(history, message, casting.response),
                search_stats=stats,
                parsed_query=parsed,
                intent_analysis=intent,
                resume_insights=analyses,
                pipeline="search-with-resume-analysis",
            )

        reply = await generate_conversational_response(message, history, intent, llm=self.llm)
        return ChatResponse(
            response=reply.response,
            profiles=[],
            conversation_history=_history(history, message, reply.response),
            intent_analysis=intent,
            should_transition_to_search=reply.should_transition_to_search,
            pipeline="conversation-mode",
        )

    async def _name_lookup(
        self,
        session: AsyncSession,
        request: ChatRequest,
        name_query: NameQuery,
        pipeline: str,
    ) -> ChatResponse:
        matches = await name_detector.search_profiles_by_name(
            session, name_query.extracted_names, request.project_database_id
        )
        text, ids = name_detector.generate_name_based_response(request.message, name_query, matches)
        logger.info("Name lookup (%s): %d matches for %s", pipeline, len(matches), name_query.extracted_names)
        return ChatResponse(
            response=text,
            profiles=order_by_selection(matches, ids),
            conversation_history=_history(request.conversation_history, request.message, text),
            name_query=name_query,
            pipeline=pipeline,
        )

    async def _vector_fallback(
        self,
        session: AsyncSession,
        message: str,
        project_id: Optional[UUID],
        result: QueryResult,
    ) -> QueryResult:
        if not self.config.use_vector_fallback or self.embedder is None:
            return result
        try:
            scope = None
            if project_id is not None:
                scope = await profile_repo.submitted_profile_ids(session, project_id)
                if not scope:
                    return result
            loop = asyncio.get_running_loop()
            vector = await loop.run_in_executor(None, partial(self.embedder.embed, message))
            rows = await profile_repo.vector_search(session, vector, limit=VECTOR_LIMIT, profile_ids=scope)
        except Exception as e:
            logger.warning("Vector fallback failed: %s", e)
            return result
        records = [ProfileRecord.from_orm_profile(p) for p in rows]
        logger.info("Vector fallback returned %d profiles", len(records))
        if not records:
            return result
        return QueryResult(
            profiles=records,
            total_matched=len(records),
            method="vector",
            filters_applied=[*result.filters_applied, "semantic similarity"],
        )
