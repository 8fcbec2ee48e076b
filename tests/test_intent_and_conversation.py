import asyncio

from conftest import FakeLLM

from stuntpitch.schemas.casting import IntentAnalysis
from stuntpitch.schemas.chat import ChatMessage
from stuntpitch.services.casting.conversational_agent import FALLBACK_RESPONSES, generate_conversational_response
from stuntpitch.services.casting.intent_detector import detect_user_intent, keyword_intent


def test_keyword_fallback():
    assert keyword_intent("find me a stunt driver", False).intent == "search"
    assert keyword_intent("find me a stunt driver", False).confidence == 0.7
    assert keyword_intent("hello!", False).intent == "greeting"
    assert keyword_intent("thanks for that", True).intent == "greeting"
    assert keyword_intent("thanks for that", False).intent == "conversation"


def test_model_intent_is_used_and_clamped():
    llm = FakeLLM(json_replies={"intent": {"intent": "search", "confidence": 1.5, "explanation": "wants talent"}})
    result = asyncio.run(detect_user_intent("Any riggers available?", llm=llm))
    assert result.intent == "search"
    assert result.confidence == 1.0
    assert result.explanation == "wants talent"


def test_llm_error_falls_back_to_keywords():
    result = asyncio.run(detect_user_intent("looking for a horse rider", llm=FakeLLM()))
    assert result.intent == "search"
    assert result.confidence == 0.7


def test_unknown_intent_label_falls_back():
    llm = FakeLLM(json_replies={"intent": {"intent": "shopping", "confidence": 0.9}})
    history = [ChatMessage(role="user", content="hi"), ChatMessage(role="assistant", content="hello")]
    result = asyncio.run(detect_user_intent("what's new", history, llm=llm))
    assert result.intent == "conversation"


def test_history_reaches_the_prompt():
    llm = FakeLLM(json_replies={"intent": {"intent": "help", "confidence": 0.8}})
    history = [{"role": "user", "content": "we shoot in Atlanta next month"}]
    asyncio.run(detect_user_intent("how does this work?", history, llm=llm))
    assert "user: we shoot in Atlanta next month" in llm.calls[0][1]


def test_conversation_reply_flags_search_transition():
    llm = FakeLLM(text_replies={"conversation": "Happy to help! What kind of performer are you looking for?"})
    intent = IntentAnalysis(intent="greeting", confidence=0.9)
    reply = asyncio.run(generate_conversational_response("hey", [], intent, llm=llm))
    assert reply.should_transition_to_search
    assert llm.calls[0][2]["temperature"] == 0.7


def test_conversation_failure_uses_canned_reply():
    intent = IntentAnalysis(intent="help", confidence=0.9)
    reply = asyncio.run(generate_conversational_response("how?", [], intent, llm=FakeLLM()))
    assert reply.response == FALLBACK_RESPONSES["help"]
    assert not reply.should_transition_to_search
