import asyncio
import uuid

from conftest import FakeLLM, FakeSession, make_orm_profile, make_record

from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import QueryResult
from stuntpitch.schemas.chat import ChatMessage, ChatRequest
from stuntpitch.services.casting import name_detector, pipeline
from stuntpitch.services.casting.pipeline import ChatPipeline, PipelineConfig, order_by_selection
from stuntpitch.services.casting.resume_analyzer import ResumeAnalysisConfig

CONFIG = PipelineConfig(resume=ResumeAnalysisConfig(), structured_output=True, use_vector_fallback=True)


class FakeEmbedder:
    def __init__(self):
        self.texts = []

    def embed(self, text):
        self.texts.append(text)
        return [0.1] * 8


def _run(p, request, session=None):
    return asyncio.run(p.handle(session or FakeSession(), request))


def test_order_by_selection():
    a, b, c = make_record("A"), make_record("B"), make_record("C")
    assert order_by_selection([a, b, c], [c.id, "ghost", a.id]) == [c, a, b]


def test_name_lookup_skips_the_model(monkeypatch):
    john = make_record("John Smith")

    async def by_name(session, names, project_id=None):
        assert "John Smith" in names
        return [john]

    monkeypatch.setattr(name_detector, "search_profiles_by_name", by_name)
    llm = FakeLLM()
    response = _run(ChatPipeline(CONFIG, llm=llm), ChatRequest(message="What is John Smith's phone number?"))
    assert response.pipeline == "name-lookup-mode"
    assert [p.id for p in response.profiles] == [john.id]
    assert response.name_query.query_type == "contact_info"
    assert llm.calls == []


def test_search_path_orders_selected_profiles_first(monkeypatch):
    found = [make_record(f"Performer {i}") for i in range(3)]
    seen = {}

    async def structured(session, parsed, project_id=None, **kwargs):
        seen["parsed"] = parsed
        return QueryResult(profiles=found, total_matched=3, method="structured", filters_applied=["gender: Woman"])

    monkeypatch.setattr(pipeline, "query_with_structured_filters", structured)
    llm = FakeLLM(json_replies={
        "intent": {"intent": "search", "confidence": 0.9},
        "parser": {"gender": "Woman", "location": "atlanta-ga", "skills": ["fight"], "confidence": 0.8},
        "casting": {"response": "Performer 2 fits best.", "profile_ids": [found[2].id, "bogus"]},
    })
    history = [ChatMessage(role="user", content=f"turn {i}") for i in range(6)]
    request = ChatRequest(message="Need a female fighter in Atlanta", conversation_history=history)
    response = _run(ChatPipeline(CONFIG, llm=llm), request)

    assert response.pipeline == "search-with-resume-analysis"
    assert response.response == "Performer 2 fits best."
    assert [p.id for p in response.profiles] == [found[2].id, found[0].id, found[1].id]
    assert seen["parsed"].gender == "Woman"
    assert response.search_stats["method"] == "structured"
    assert response.search_stats["totalFound"] == 3
    assert response.search_stats["resumeAnalysis"]["analyzedCount"] == 0
    assert len(response.conversation_history) == 6
    assert response.conversation_history[-1].role == "assistant"
    assert llm.kinds() == ["intent", "parser", "casting"]


def test_zero_results_use_vector_fallback(monkeypatch):
    async def structured(session, parsed, project_id=None, **kwargs):
        return QueryResult(profiles=[], total_matched=0, method="structured", filters_applied=["gender: Man"])

    row = make_orm_profile("Vector Match")

    async def vector_search(session, embedding, *, limit, profile_ids):
        assert profile_ids is None
        return [row]

    monkeypatch.setattr(pipeline, "query_with_structured_filters", structured)
    monkeypatch.setattr(profile_repo, "vector_search", vector_search)
    embedder = FakeEmbedder()
    llm = FakeLLM(json_replies={
        "intent": {"intent": "search", "confidence": 0.9},
        "parser": {"gender": "Man", "confidence": 0.7},
    })
    response = _run(ChatPipeline(CONFIG, llm=llm, embedder=embedder), ChatRequest(message="need a guy who does parkour"))

    assert embedder.texts == ["need a guy who does parkour"]
    assert response.search_stats["method"] == "vector"
    assert response.search_stats["filtersApplied"] == ["gender: Man", "semantic similarity"]
    assert [p.full_name for p in response.profiles] == ["Vector Match"]
    # casting call failed, so the fallback text and first profiles are used
    assert response.response == "I found 1 performer(s) that could work for your project!"


def test_vector_fallback_disabled(monkeypatch):
    async def structured(session, parsed, project_id=None, **kwargs):
        return QueryResult()

    monkeypatch.setattr(pipeline, "query_with_structured_filters", structured)
    embedder = FakeEmbedder()
    config = PipelineConfig(resume=ResumeAnalysisConfig(), use_vector_fallback=False)
    llm = FakeLLM(json_replies={"intent": {"intent": "search", "confidence": 0.9}})
    response = _run(ChatPipeline(config, llm=llm, embedder=embedder), ChatRequest(message="need a stunt driver"))
    assert embedder.texts == []
    assert response.profiles == []
    assert response.response.startswith("No exact matches found")


def test_empty_project_skips_vector_fallback(monkeypatch):
    async def structured(session, parsed, project_id=None, **kwargs):
        return QueryResult(filters_applied=["project_database"])

    async def no_submissions(session, project_id):
        return []

    monkeypatch.setattr(pipeline, "query_with_structured_filters", structured)
    monkeypatch.setattr(profile_repo, "submitted_profile_ids", no_submissions)
    embedder = FakeEmbedder()
    llm = FakeLLM(json_replies={"intent": {"intent": "search", "confidence": 0.9}})
    request = ChatRequest(message="need a stunt driver", project_database_id=uuid.uuid4())
    response = _run(ChatPipeline(CONFIG, llm=llm, embedder=embedder), request)
    assert embedder.texts == []
    assert response.search_stats["filtersApplied"] == ["project_database"]


def test_conversation_path():
    llm = FakeLLM(
        json_replies={"intent": {"intent": "greeting", "confidence": 0.95}},
        text_replies={"conversation": "Hi! What kind of stunt work are you looking for?"},
    )
    response = _run(ChatPipeline(CONFIG, llm=llm), ChatRequest(message="hello there"))
    assert response.pipeline == "conversation-mode"
    assert response.profiles == []
    assert response.should_transition_to_search is True
    assert response.intent_analysis.intent == "greeting"


def test_low_confidence_search_is_conversation():
    llm = FakeLLM(
        json_replies={"intent": {"intent": "search", "confidence": 0.5}},
        text_replies={"conversation": "Tell me more about your production."},
    )
    response = _run(ChatPipeline(CONFIG, llm=llm), ChatRequest(message="maybe something later"))
    assert response.pipeline == "conversation-mode"
    assert "parser" not in llm.kinds()
