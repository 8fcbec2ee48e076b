# stuntpitch/services/casting/intent_detector.py
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from stuntpitch.schemas.casting import IntentAnalysis
from stuntpitch.services.common.llm_client import default_llm_client, format_history, load_prompt

logger = logging.getLogger("casting.intent")

INTENT_PROMPT = load_prompt("casting/intent.prompt.txt")

SEARCH_KEYWORDS = ("find", "need", "looking for", "search", "want", "height", "location",
                   "skill", "fighter", "driver", "performer")
GREETING_KEYWORDS = ("hi", "hello", "hey", "greetings", "good morning", "good afternoon")

HISTORY_TURNS = 3


def keyword_intent(message: str, is_first_message: bool) -> IntentAnalysis:
    """Best-effort classification used when the model is unavailable."""
    lower = message.lower()
    if any(k in lower for k in SEARCH_KEYWORDS):
        return IntentAnalysis(intent="search", confidence=0.7, explanation="Contains search-related keywords")
    if any(k in lower for k in GREETING_KEYWORDS) or is_first_message:
        return IntentAnalysis(intent="greeting", confidence=0.8, explanation="Appears to be a greeting or first message")
    return IntentAnalysis(intent="conversation", confidence=0.6, explanation="Fallback to conversation mode")


def _build_messages(message: str, history: Sequence[Any]) -> list[dict]:
    recent = format_history(history, HISTORY_TURNS) or "This is the start of the conversation."
    return [{"role": "user", "content": INTENT_PROMPT.format(recent_context=recent, message=message)}]


async def detect_user_intent(message: str, history: Sequence[Any] = (), llm: Optional[Any] = None) -> IntentAnalysis:
    """Classify the message as search / conversation / help / greeting. Never raises."""
    llm = llm or default_llm_client
    is_first = len(history) == 0

    loop = asyncio.get_running_loop()
    res = await loop.run_in_executor(
        None,
        partial(llm.chat_json, _build_messages(message, history), timeout=30, max_tokens=200),
    )
    data = res.data
    if "__llm_error__" in data:
        logger.warning("Intent detection LLM error, using keyword fallback: %s", data["__llm_error__"])
        return keyword_intent(message, is_first)

    try:
        confidence = min(1.0, max(0.0, float(data.get("confidence", 0.0))))
        analysis = IntentAnalysis(
            intent=data.get("intent"),
            confidence=confidence,
            explanation=str(data.get("explanation") or ""),
            suggested_response=data.get("suggestedResponse") or data.get("suggested_response"),
        )
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("Malformed intent payload %s (%s); using keyword fallback", data, e)
        return keyword_intent(message, is_first)

    logger.info("Intent: %s (confidence=%.2f) %s", analysis.intent, analysis.confidence, analysis.explanation)
    return analysis
