# stuntpitch/services/casting/resume_analyzer.py
"""Resume insights for the top matches of a search.

Flow:
1. Keep the first `max_profiles` matches that have a resume
2. Gate each one on tier eligibility (pure function of profile + config + now)
3. Stored resume_text, else fetch + parse the file (blocking, run in the executor)
4. One JSON-mode LLM call per resume, all of them gathered concurrently
A failure on one profile becomes `analyzed=False` with a reason; it never aborts the batch.
"""
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Optional, Sequence

from stuntpitch.core.config import settings
from stuntpitch.schemas.casting import ResumeAnalysis
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.services.common.llm_client import default_llm_client, load_prompt
from stuntpitch.services.resumes.text_extraction import fetch_resume_text

logger = logging.getLogger("casting.resume_analyzer")

RESUME_ANALYSIS_PROMPT = load_prompt("casting/resume_analysis.prompt.txt")

PAID_TIERS = ("pro", "premium")


@dataclass(frozen=True)
class ResumeAnalysisConfig:
    enable_for_all_users: bool = True
    eligible_tiers: tuple[str, ...] = PAID_TIERS
    max_profiles: int = 2
    fetch_timeout_seconds: float = 10.0
    text_limit: int = 3000
    min_text_chars: int = 50

    @classmethod
    def from_settings(cls) -> "ResumeAnalysisConfig":
        return cls(
            enable_for_all_users=settings.RESUME_ANALYSIS_ENABLED_FOR_ALL,
            eligible_tiers=tuple(settings.RESUME_ANALYSIS_TIERS),
            max_profiles=settings.RESUME_ANALYSIS_MAX_PROFILES,
            fetch_timeout_seconds=settings.RESUME_FETCH_TIMEOUT_SECONDS,
            text_limit=settings.RESUME_TEXT_LIMIT,
            min_text_chars=settings.RESUME_MIN_TEXT_CHARS,
        )

    @property
    def enabled(self) -> bool:
        return self.max_profiles > 0


def is_eligible_for_resume_analysis(
    profile: ProfileRecord,
    config: ResumeAnalysisConfig,
    now: Optional[datetime] = None,
) -> bool:
    if config.enable_for_all_users:
        return True
    tier = profile.subscription_tier or "free"
    if tier not in config.eligible_tiers:
        return False
    if tier in PAID_TIERS and profile.subscription_expires_at is not None:
        now = now or datetime.now(timezone.utc)
        expires = profile.subscription_expires_at
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        if expires < now:
            return False
    return True


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return []


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _analyze_text(llm, resume_text: str, search_context: str) -> dict:
    messages = [{
        "role": "user",
        "content": RESUME_ANALYSIS_PROMPT.format(search_context=search_context, resume_text=resume_text),
    }]
    res = llm.chat_json(messages, timeout=60, max_tokens=400, temperature=0.3)
    if "__llm_error__" in res.data:
        raise RuntimeError(f"AI analysis failed: {res.data['__llm_error__']}")
    return res.data


async def analyze_profile_resume(
    profile: ProfileRecord,
    search_context: str,
    config: ResumeAnalysisConfig,
    *,
    llm: Any = None,
    fetcher: Callable[..., str] = fetch_resume_text,
    now: Optional[datetime] = None,
) -> ResumeAnalysis:
    base = dict(profile_id=profile.id, full_name=profile.full_name, tier=profile.subscription_tier or "free")

    if not is_eligible_for_resume_analysis(profile, config, now):
        return ResumeAnalysis(**base, reason=f"Tier '{base['tier']}' not eligible for resume analysis")
    if not profile.resume_url and not profile.resume_text:
        return ResumeAnalysis(**base, reason="No resume uploaded")

    loop = asyncio.get_running_loop()
    try:
        text = profile.resume_text
        if not text:
            logger.info("No stored text for %s, extracting from %s", profile.id, profile.resume_url)
            text = await loop.run_in_executor(
                None, partial(fetcher, profile.resume_url, timeout=config.fetch_timeout_seconds)
            )
        text = (text or "").strip()
        if len(text) < config.min_text_chars:
            return ResumeAnalysis(**base, reason="Resume text not available or too short")

        data = await loop.run_in_executor(
            None, partial(_analyze_text, llm or default_llm_client, text[: config.text_limit], search_context)
        )
        logger.info("Analyzed resume for %s", profile.id)
        return ResumeAnalysis(
            **base,
            relevant_experience=_as_str_list(data.get("relevantExperience")),
            notable_credits=_as_str_list(data.get("notableCredits")),
            years_experience=max(0.0, _as_number(data.get("yearsExperience"))),
            relevance_score=min(1.0, max(0.0, _as_number(data.get("relevanceScore")))),
            skills_from_resume=_as_str_list(data.get("skillsFromResume")),
            analyzed=True,
        )
    except Exception as e:
        logger.error("Resume analysis failed for %s: %s", profile.id, e)
        return ResumeAnalysis(**base, reason=f"Analysis failed: {e}")


async def analyze_eligible_resumes(
    profiles: Sequence[ProfileRecord],
    search_context: str,
    config: ResumeAnalysisConfig,
    *,
    llm: Any = None,
    fetcher: Callable[..., str] = fetch_resume_text,
    now: Optional[datetime] = None,
) -> list[ResumeAnalysis]:
    if not config.enabled:
        logger.info("Resume analysis disabled")
        return []

    with_resumes = [p for p in profiles if p.resume_url or p.resume_text][: config.max_profiles]
    logger.info("Resume analysis: %d of %d top profiles have resumes", len(with_resumes), len(profiles))
    if not with_resumes:
        return []

    analyses = await asyncio.gather(*[
        analyze_profile_resume(p, search_context, config, llm=llm, fetcher=fetcher, now=now)
        for p in with_resumes
    ])
    logger.info("Resume analysis completed %d/%d", sum(a.analyzed for a in analyses), len(analyses))
    return list(analyses)


def summarize_resume_analyses(
    profiles: Sequence[ProfileRecord],
    analyses: Sequence[ResumeAnalysis],
    config: ResumeAnalysisConfig,
    now: Optional[datetime] = None,
) -> dict:
    """The `searchStats.resumeAnalysis` block."""
    return {
        "totalEligible": sum(1 for p in profiles if is_eligible_for_resume_analysis(p, config, now)),
        "analyzedCount": sum(1 for a in analyses if a.analyzed),
        "tierBreakdown": dict(Counter(a.tier for a in analyses)),
    }
