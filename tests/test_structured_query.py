import asyncio
import random
import uuid

from conftest import FakeSession, make_orm_profile, make_record
from sqlalchemy.dialects import postgresql

from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.casting import ParsedQuery
from stuntpitch.schemas.profile import PhotoItem
from stuntpitch.services.casting.structured_query import (
    build_profile_query,
    height_at_least,
    height_at_most,
    profile_completeness,
    query_with_structured_filters,
    rank_by_completeness,
)


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_filter_labels_in_application_order():
    parsed = ParsedQuery(
        gender="Woman",
        location="atlanta-ga",
        height_min=66,
        height_max=70,
        skills=("fight",),
        confidence=0.9,
    )
    stmt, applied = build_profile_query(parsed)
    assert applied == [
        "gender: Woman",
        "location: atlanta-ga",
        "height: 5'6\" - 5'10\" (±3\" flex)",
        "skills: fight (with related skills)",
    ]
    sql = _sql(stmt)
    assert "profiles.is_public IS true" in sql
    assert "profiles.gender" in sql
    assert "EXISTS" in sql
    assert "profile_skills.skill_id ILIKE" in sql


def test_empty_query_only_restricts_to_public():
    stmt, applied = build_profile_query(ParsedQuery.empty())
    assert applied == []
    assert "LIMIT" in _sql(stmt)


def test_unknown_union_and_local_travel_add_nothing():
    _, applied = build_profile_query(ParsedQuery(union_status="Unknown", travel_radius="local"))
    assert applied == []


def test_union_travel_weight_and_broad_location_labels():
    parsed = ParsedQuery(
        location="los-angeles-ca",
        broad_search=True,
        weight_min=150,
        union_status="Non-union",
        travel_radius="regional",
        availability="available",
    )
    stmt, applied = build_profile_query(parsed)
    assert applied == [
        "location: los-angeles-ca (broad search)",
        "weight: 150-any lbs (±10 flex)",
        "availability: available",
        "union: Non-union",
        "travel: regional+",
    ]
    assert "profiles.location ILIKE" in _sql(stmt)


def test_single_height_bound_is_applied_alone():
    _, applied = build_profile_query(ParsedQuery(height_min=72))
    assert applied == ["height: 6'0\" - any (±3\" flex)"]


def test_project_scope_comes_first():
    ids = [uuid.uuid4()]
    _, applied = build_profile_query(ParsedQuery(gender="Man"), ids)
    assert applied[0] == "project_database"


def test_empty_project_short_circuits(monkeypatch):
    async def no_submissions(session, project_id):
        return []

    monkeypatch.setattr(profile_repo, "submitted_profile_ids", no_submissions)
    session = FakeSession()
    result = asyncio.run(query_with_structured_filters(session, ParsedQuery(gender="Man"), uuid.uuid4()))
    assert result.profiles == []
    assert result.total_matched == 0
    assert result.filters_applied == ["project_database"]
    assert session.executed == []


def test_structured_results_are_records():
    rows = [make_orm_profile("Alex Kim"), make_orm_profile("Dana Ray", bio="Stunt driver")]
    session = FakeSession(results=[rows])
    result = asyncio.run(query_with_structured_filters(session, ParsedQuery(), rng=random.Random(1)))
    assert result.method == "structured"
    assert result.total_matched == 2
    # the profile with a bio is more complete
    assert result.profiles[0].full_name == "Dana Ray"


def test_db_error_runs_fallback(monkeypatch):
    fallback_rows = [make_orm_profile("Fallback One")]

    async def public_profiles(session, *, limit=20):
        assert limit == 20
        return fallback_rows

    monkeypatch.setattr(profile_repo, "public_profiles", public_profiles)
    session = FakeSession(error=RuntimeError("relation does not exist"))
    result = asyncio.run(query_with_structured_filters(session, ParsedQuery(gender="Woman")))
    assert result.method == "fallback"
    assert result.filters_applied == ["fallback - no filters applied"]
    assert [p.full_name for p in result.profiles] == ["Fallback One"]
    assert session.rollbacks == 1


def test_completeness_ranking():
    bare = make_record("Bare")
    rich = make_record(
        "Rich",
        bio="Veteran stunt coordinator",
        phone="555-0100",
        reel_url="https://example.com/reel",
        skills=["fight"],
        profile_photos=[PhotoItem(file_path="photos/x.jpg", is_primary=True)],
    )
    assert profile_completeness(rich) > profile_completeness(bare)
    assert rank_by_completeness([bare, rich], random.Random(0)) == [rich, bare]


def _literal(expr) -> str:
    return str(expr.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


def test_height_lower_bound_splits_into_feet_and_inches():
    assert _literal(height_at_least(63)) == (
        "profiles.height_feet > 5 OR profiles.height_feet = 5 AND coalesce(profiles.height_inches, 0) >= 3"
    )


def test_height_upper_bound_splits_into_feet_and_inches():
    assert _literal(height_at_most(73)) == (
        "profiles.height_feet < 6 OR profiles.height_feet = 6 AND coalesce(profiles.height_inches, 0) <= 1"
    )


def test_height_bound_on_a_whole_foot():
    assert _literal(height_at_least(72)) == (
        "profiles.height_feet > 6 OR profiles.height_feet = 6 AND coalesce(profiles.height_inches, 0) >= 0"
    )
    assert _literal(height_at_most(72)) == (
        "profiles.height_feet < 6 OR profiles.height_feet = 6 AND coalesce(profiles.height_inches, 0) <= 0"
    )


def test_flexed_height_range_reaches_the_query():
    stmt, _ = build_profile_query(ParsedQuery(height_min=66, height_max=70))
    sql = _literal(stmt)
    # 66 - 3 = 5'3", 70 + 3 = 6'1"
    assert "profiles.height_feet > 5 OR profiles.height_feet = 5 AND coalesce(profiles.height_inches, 0) >= 3" in sql
    assert "profiles.height_feet < 6 OR profiles.height_feet = 6 AND coalesce(profiles.height_inches, 0) <= 1" in sql
