import asyncio
import uuid
from types import SimpleNamespace

import pytest
from conftest import FakeSession, make_orm_profile
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from stuntpitch.core.config import settings
from stuntpitch.models.profile import Profile
from stuntpitch.repositories import profile_repo, search_log_repo
from stuntpitch.schemas.profile import ProfileCreate, ProfileUpdate
from stuntpitch.schemas.search import SearchFilters, SearchRequest
from stuntpitch.services.profiles import service as profile_service
from stuntpitch.services.profiles.service import UploadRejected
from stuntpitch.services.search import service as search_service


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_filters_become_predicates():
    filters = SearchFilters(
        gender="Woman",
        location="atlanta-ga",
        min_height=64,
        max_weight=160,
        skills=["fight", "stage combat"],
        travel_radius="national",
    )
    sql = _sql(search_service.apply_filters(select(Profile), "rigger", filters))
    assert "profiles.full_name ILIKE" in sql
    assert "profiles.gender =" in sql
    assert "profiles.primary_location_structured =" in sql
    assert "profiles.weight_lbs <=" in sql
    assert "profiles.height_feet >" in sql
    assert "profiles.travel_radius IN" in sql
    assert sql.count("EXISTS") == 2


def test_empty_filters_add_nothing():
    base = select(Profile)
    assert _sql(search_service.apply_filters(base, None, SearchFilters())) == _sql(base)
    assert SearchFilters().is_empty()


def test_project_without_submissions_returns_empty_page(monkeypatch):
    async def no_submissions(session, project_id):
        return []

    monkeypatch.setattr(profile_repo, "submitted_profile_ids", no_submissions)
    session = FakeSession()
    request = SearchRequest(project_database_id=uuid.uuid4(), limit=12)
    response = asyncio.run(search_service.search_profiles(session, request))
    assert response.total == 0
    assert response.total_pages == 0
    assert response.profiles == []
    assert session.executed == []


def test_search_paginates_and_logs(monkeypatch):
    logged = {}

    async def log_search(session, *, query, filters, results_count):
        logged.update(query=query, filters=filters, results_count=results_count)

    monkeypatch.setattr(search_log_repo, "log_search", log_search)
    rows = [make_orm_profile("Alex Kim"), make_orm_profile("Dana Ray")]
    session = FakeSession(results=[[25], rows])
    request = SearchRequest(query="stunt", filters=SearchFilters(gender="Man"), page=2, limit=10)
    response = asyncio.run(search_service.search_profiles(session, request))

    assert response.total == 25
    assert response.total_pages == 3
    assert [p.full_name for p in response.profiles] == ["Alex Kim", "Dana Ray"]
    assert "OFFSET" in _sql(session.executed[1])
    assert logged == {"query": "stunt", "filters": {"gender": "Man"}, "results_count": 25}


def test_search_log_failure_never_fails_request(monkeypatch):
    async def broken_log(session, **kwargs):
        raise RuntimeError("search_logs missing")

    monkeypatch.setattr(search_log_repo, "log_search", broken_log)
    session = FakeSession()
    asyncio.run(search_service.log_search_safely(session, SearchRequest(query="x"), 0))
    assert session.rollbacks == 1


def test_photo_type_and_size_are_checked(monkeypatch):
    profile = make_orm_profile()
    with pytest.raises(UploadRejected):
        asyncio.run(profile_service.add_photo(None, profile, content=b"x", filename="notes.pdf", content_type="application/pdf"))

    monkeypatch.setattr(settings, "MAX_PHOTO_BYTES", 4)
    with pytest.raises(UploadRejected) as exc:
        asyncio.run(profile_service.add_photo(None, profile, content=b"12345", filename="a.png", content_type="image/png"))
    assert exc.value.status_code == 413


def test_photo_is_stored_under_storage_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    stored = {}

    async def add_photo(session, profile, *, file_path, file_name):
        stored.update(file_path=file_path, file_name=file_name)
        return SimpleNamespace(is_primary=True, **stored)

    monkeypatch.setattr(profile_repo, "add_photo", add_photo)
    profile = make_orm_profile()
    asyncio.run(profile_service.add_photo(None, profile, content=b"\x89PNG...", filename="Head Shot.PNG", content_type="image/png"))

    assert stored["file_name"] == "Head Shot.PNG"
    assert stored["file_path"].startswith(f"photos/{profile.id}/")
    assert stored["file_path"].endswith(".png")
    assert (tmp_path / stored["file_path"]).read_bytes() == b"\x89PNG..."


def test_resume_upload_extracts_text(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    saved = {}
    profile = make_orm_profile()

    async def attach_resume(session, prof, **kwargs):
        saved.update(kwargs)
        return prof

    monkeypatch.setattr(profile_repo, "attach_resume", attach_resume)
    text = b"Stunt coordinator with twelve years of high falls and fire work."
    record = asyncio.run(profile_service.upload_resume(None, profile, content=text, filename="cv.txt", content_type="text/plain"))

    assert saved["resume_text"] == text.decode()
    assert saved["file_size"] == len(text)
    assert saved["resume_url"].startswith(f"resumes/{profile.id}/")
    assert record.id == str(profile.id)


def test_resume_upload_rejects_other_formats():
    with pytest.raises(UploadRejected):
        asyncio.run(profile_service.upload_resume(None, make_orm_profile(), content=b"MZ", filename="cv.exe", content_type=None))


def test_profile_ethnicity_accepts_labels_and_legacy_text():
    assert ProfileCreate(full_name="Kim Lee", email="kim@example.com", ethnicity="Middle Eastern").ethnicity == "MIDDLE_EASTERN"
    assert ProfileCreate(full_name="Kim Lee", email="kim@example.com", ethnicity="Latina").ethnicity == "HISPANIC"
    assert ProfileUpdate(ethnicity="ASIAN").ethnicity == "ASIAN"
    with pytest.raises(ValidationError):
        ProfileUpdate(ethnicity="martian")


def test_city_name_location_matches_structured_code():
    stmt = search_service.apply_filters(select(Profile), None, SearchFilters(location="Atlanta"))
    params = stmt.compile(dialect=postgresql.dialect()).params
    assert "atlanta-ga" in params.values()
    assert "%Atlanta%" in params.values()


def test_private_profile_view_is_not_counted_for_strangers(monkeypatch):
    profile = make_orm_profile("Kim Lee", is_public=False, user_id="kim")
    views = []

    async def get_profile(session, profile_id):
        return profile

    async def increment_views(session, profile_id):
        views.append(profile_id)

    monkeypatch.setattr(profile_repo, "get_profile", get_profile)
    monkeypatch.setattr(profile_repo, "increment_views", increment_views)

    assert asyncio.run(profile_service.view_profile(None, profile.id, viewer_id="stranger")) is None
    assert asyncio.run(profile_service.view_profile(None, profile.id)) is None
    assert views == []

    record = asyncio.run(profile_service.view_profile(None, profile.id, viewer_id="kim"))
    assert record.full_name == "Kim Lee"
    assert views == [profile.id]


def test_deleting_profile_removes_stored_files(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    profile = make_orm_profile()
    other = make_orm_profile("Other Person")
    for folder, owner in (("photos", profile), ("resumes", profile), ("photos", other)):
        directory = tmp_path / folder / str(owner.id)
        directory.mkdir(parents=True)
        (directory / "file.bin").write_bytes(b"x")
    deleted = []

    async def delete_profile(session, prof):
        deleted.append(prof.id)

    monkeypatch.setattr(profile_repo, "delete_profile", delete_profile)
    asyncio.run(profile_service.delete_profile(None, profile))

    assert deleted == [profile.id]
    assert not (tmp_path / "photos" / str(profile.id)).exists()
    assert not (tmp_path / "resumes" / str(profile.id)).exists()
    assert (tmp_path / "photos" / str(other.id) / "file.bin").exists()
