import asyncio

from conftest import FakeSession, make_record

from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import NameQuery
from stuntpitch.services.casting import name_detector
from stuntpitch.services.casting.name_detector import detect_name_query, generate_name_based_response


def test_contact_request_for_named_person():
    q = detect_name_query("What is John Smith's phone number?")
    assert q.is_name_query
    assert "John Smith" in q.extracted_names
    assert q.query_type == "contact_info"
    assert q.confidence == 0.9


def test_resume_request_is_general_info():
    q = detect_name_query("Sarah Connor resume")
    assert q.is_name_query
    assert q.extracted_names[0] == "Sarah Connor"
    assert q.query_type == "general_info"
    assert q.confidence == 0.85


def test_tell_me_about_is_profile_lookup():
    q = detect_name_query("Tell me about Sarah Connor")
    assert q.is_name_query
    assert "Sarah Connor" in q.extracted_names
    assert q.query_type == "profile_lookup"
    assert q.confidence == 0.7


def test_casting_request_is_not_a_name_query():
    q = detect_name_query("I need a female fighter in Atlanta")
    assert not q.is_name_query
    assert q.extracted_names == []
    assert q.query_type is None
    assert q.confidence == 0.0


def test_all_lowercase_pair_is_not_a_name():
    q = detect_name_query("john smith")
    assert not q.is_name_query
    assert q.extracted_names == []


def test_capitalized_words_inside_a_sentence():
    q = detect_name_query("Can you pull up Maria Lopez, please")
    assert "Maria Lopez" in q.extracted_names


def test_detection_is_deterministic():
    message = "Show me Jack Reacher's profile"
    assert detect_name_query(message) == detect_name_query(message)


def test_no_profiles_found_reply():
    q = NameQuery(is_name_query=True, extracted_names=["Ghost Rider"], query_type="profile_lookup", confidence=0.7)
    text, ids = generate_name_based_response("Tell me about Ghost Rider", q, [])
    assert "Ghost Rider" in text
    assert "couldn't find" in text
    assert ids == []


def test_single_match_contact_reply():
    q = NameQuery(is_name_query=True, extracted_names=["John Smith"], query_type="contact_info", confidence=0.9)
    profile = make_record("John Smith")
    text, ids = generate_name_based_response("What is John Smith's phone number?", q, [profile])
    assert "John Smith" in text
    assert "contact" in text
    assert ids == [profile.id]


def test_single_match_describes_profile():
    q = NameQuery(is_name_query=True, extracted_names=["John Smith"], query_type="profile_lookup", confidence=0.7)
    profile = make_record("John Smith", primary_location_structured="atlanta-ga", skills=["fight", "drive"])
    text, ids = generate_name_based_response("Tell me about John Smith", q, [profile])
    assert "atlanta-ga" in text
    assert "fight, drive" in text
    assert ids == [profile.id]


def test_multiple_matches_pick_close_one():
    q = NameQuery(is_name_query=True, extracted_names=["John Smith"], query_type="profile_lookup", confidence=0.7)
    other = make_record("Johnny Walker")
    exact = make_record("John Smith")
    text, ids = generate_name_based_response("Tell me about John Smith", q, [other, exact])
    assert ids == [exact.id]


def test_multiple_ambiguous_matches_ask_to_narrow_down():
    q = NameQuery(is_name_query=True, extracted_names=["Sam"], query_type="profile_lookup", confidence=0.7)
    profiles = [make_record(f"Performer {i}") for i in range(6)]
    text, ids = generate_name_based_response("Do you know anyone called Sam who does stunts", q, profiles)
    assert "several performers" in text
    assert "and 3 others" in text
    assert ids == [p.id for p in profiles[:5]]


def test_name_search_failure_returns_empty(monkeypatch):
    async def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(profile_repo, "search_by_name", boom)
    result = asyncio.run(name_detector.search_profiles_by_name(FakeSession(), ["John Smith"]))
    assert result == []


def test_name_search_without_names_skips_db():
    session = FakeSession()
    assert asyncio.run(name_detector.search_profiles_by_name(session, [])) == []
    assert session.executed == []


def test_searches_in_known_markets_are_not_names():
    for message in (
        "Any stunt doubles in San Diego?",
        "Need a fighter in Las Vegas",
        "Any San Francisco performers?",
        "Looking for Martial Artists",
    ):
        q = detect_name_query(message)
        assert not q.is_name_query, message
        assert q.extracted_names == [], message


def test_place_word_inside_a_real_name_is_kept():
    q = detect_name_query("Tell me about Austin Miller")
    assert q.is_name_query
    assert "Austin Miller" in q.extracted_names
