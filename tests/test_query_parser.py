import asyncio
import logging

from conftest import FakeLLM

from stuntpitch.schemas.casting import ParsedQuery
from stuntpitch.services.casting.query_parser import build_parser_prompt, parse_user_query, validate_parsed_query


def test_valid_values_survive():
    parsed = validate_parsed_query({
        "gender": "Woman",
        "location": "atlanta-ga",
        "ethnicities": ["ASIAN", "HISPANIC"],
        "height_min": 66,
        "height_max": 70,
        "skills": ["fight", "drive"],
        "union_status": "SAG-AFTRA",
        "availability": "available",
        "travel_radius": "national",
        "broad_search": True,
        "confidence": 0.85,
    })
    assert parsed.gender == "Woman"
    assert parsed.location == "atlanta-ga"
    assert parsed.ethnicities == ("ASIAN", "HISPANIC")
    assert (parsed.height_min, parsed.height_max) == (66, 70)
    assert parsed.skills == ("fight", "drive")
    assert parsed.union_status == "SAG-AFTRA"
    assert parsed.travel_radius == "national"
    assert parsed.broad_search is True
    assert parsed.confidence == 0.85


def test_invalid_gender_is_nulled_and_logged(caplog):
    with caplog.at_level(logging.INFO, logger="casting.query_parser"):
        parsed = validate_parsed_query({"gender": "male"})
    assert parsed.gender is None
    assert "Invalid gender 'male', setting to null" in caplog.text


def test_unknown_location_and_non_string_enums_are_nulled():
    parsed = validate_parsed_query({"location": "Atlanta", "union_status": ["SAG-AFTRA"], "availability": 3})
    assert parsed.location is None
    assert parsed.union_status is None
    assert parsed.availability is None


def test_lists_are_filtered_and_deduplicated():
    parsed = validate_parsed_query({
        "ethnicities": ["ASIAN", "martian", "ASIAN", None],
        "skills": ["fight", "juggling", "fight", {"x": 1}],
    })
    assert parsed.ethnicities == ("ASIAN",)
    assert parsed.skills == ("fight",)


def test_empty_ethnicities_become_none():
    assert validate_parsed_query({"ethnicities": ["nope"]}).ethnicities is None
    assert validate_parsed_query({"ethnicities": "nope"}).ethnicities is None
    assert validate_parsed_query({"skills": "fight"}).skills == ("fight",)


def test_numeric_bounds():
    parsed = validate_parsed_query({
        "height_min": 20,
        "height_max": "72",
        "weight_min": True,
        "weight_max": 1000,
    })
    assert parsed.height_min is None
    assert parsed.height_max == 72
    assert parsed.weight_min is None
    assert parsed.weight_max is None


def test_non_finite_numbers_are_nulled_without_losing_other_fields(caplog):
    with caplog.at_level(logging.INFO, logger="casting.query_parser"):
        parsed = validate_parsed_query({
            "gender": "Woman",
            "height_min": float("nan"),
            "weight_max": float("inf"),
            "confidence": float("nan"),
        })
    assert parsed.gender == "Woman"
    assert parsed.height_min is None
    assert parsed.weight_max is None
    assert parsed.confidence == 0.0
    assert "Invalid height_min" in caplog.text


def test_confidence_is_clamped_and_broad_search_coerced():
    parsed = validate_parsed_query({"confidence": 1.7, "broad_search": "yes"})
    assert parsed.confidence == 1.0
    assert parsed.broad_search is False
    assert validate_parsed_query({"confidence": "high"}).confidence == 0.0


def test_non_object_payload_gives_empty_query():
    assert validate_parsed_query(["gender", "Woman"]) == ParsedQuery.empty()


def test_prompt_lists_vocabulary_and_message():
    prompt = build_parser_prompt("need a tall guy in LA")
    assert "need a tall guy in LA" in prompt
    assert "los-angeles-ca" in prompt
    assert '"fight"' in prompt
    assert "MIDDLE_EASTERN" in prompt


def test_parse_user_query_validates_model_output():
    llm = FakeLLM(json_replies={"parser": {"gender": "Man", "location": "mars", "confidence": 0.9}})
    parsed = asyncio.run(parse_user_query("need a guy on mars", llm=llm))
    assert parsed.gender == "Man"
    assert parsed.location is None
    assert llm.kinds() == ["parser"]


def test_parse_user_query_llm_failure_is_empty():
    llm = FakeLLM()
    assert asyncio.run(parse_user_query("need a guy", llm=llm)) == ParsedQuery.empty()
