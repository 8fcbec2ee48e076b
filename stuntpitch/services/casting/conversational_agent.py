# stuntpitch/services/casting/conversational_agent.py
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Optional, Sequence

from stuntpitch.schemas.casting import ConversationalResponse, IntentAnalysis
from stuntpitch.services.common.llm_client import default_llm_client, format_history, load_prompt

logger = logging.getLogger("casting.conversation")

CONVERSATIONAL_PROMPT = load_prompt("casting/conversational.prompt.txt")

HISTORY_TURNS = 4
SEARCH_HINTS = ("search", "find", "looking for")

FALLBACK_RESPONSES = {
    "greeting": "Hi there! I'm Alex, your casting assistant. I help directors find amazing stunt performers for their projects. What kind of production are you working on?",
    "conversation": "I'd be happy to help you with that! Is there anything specific about stunt casting or our platform that I can assist you with?",
    "help": "I'm here to help you find the perfect stunt performers for your project. You can search by location, skills, physical attributes, and more. What kind of talent are you looking for?",
    "search": "Let me help you find the right performers for your project. What specific requirements do you have in mind?",
}


async def generate_conversational_response(
    message: str,
    history: Sequence[Any],
    intent: IntentAnalysis,
    llm: Optional[Any] = None,
) -> ConversationalResponse:
    llm = llm or default_llm_client
    prompt = CONVERSATIONAL_PROMPT.format(
        recent_context=format_history(history, HISTORY_TURNS) or "This is the start of the conversation.",
        message=message,
        intent=intent.intent,
        confidence_pct=f"{intent.confidence * 100:.0f}",
    )
    try:
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(
            None,
            partial(llm.chat_text, [{"role": "user", "content": prompt}], timeout=30, max_tokens=150, temperature=0.7),
        )
    except Exception as e:
        logger.error("Conversational response error: %s", e)
        return ConversationalResponse(
            response=FALLBACK_RESPONSES.get(intent.intent, FALLBACK_RESPONSES["conversation"]),
            should_transition_to_search=False,
        )

    lower = text.lower()
    transition = any(hint in lower for hint in SEARCH_HINTS)
    logger.info("Conversational response: %d chars, transition_to_search=%s", len(text), transition)
    return ConversationalResponse(response=text, should_transition_to_search=transition)
