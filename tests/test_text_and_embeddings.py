import asyncio

import pytest
from conftest import make_orm_profile, make_record

from stuntpitch.core.config import settings
from stuntpitch.repositories import profile_repo
from stuntpitch.services.common.embedding_client import profile_embedding_text
from stuntpitch.services.profiles.embeddings import generate_missing_embeddings
from stuntpitch.services.resumes.text_extraction import extract_text, fetch_resume_text


def test_plain_text_extraction():
    assert extract_text(b"High falls\nFire burns", filename="cv.txt") == "High falls\nFire burns"
    assert extract_text("café".encode(), filename="notes", content_type="text/plain; charset=utf-8") == "café"


def test_unsupported_format_raises():
    with pytest.raises(ValueError):
        extract_text(b"GIF89a", filename="photo.gif", content_type="image/gif")


def test_stored_resume_is_read_from_storage(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    (tmp_path / "resumes").mkdir()
    (tmp_path / "resumes" / "kim.txt").write_text("Ten years of precision driving.")
    assert fetch_resume_text("/resumes/kim.txt") == "Ten years of precision driving."


def test_embedding_text_covers_searchable_fields():
    record = make_record(
        "Kim Lee",
        bio="Precision driver",
        primary_location_structured="atlanta-ga",
        gender="Woman",
        skills=["drive"],
        union_status="SAG-AFTRA",
    )
    text = profile_embedding_text(record)
    assert text.splitlines()[0] == "Kim Lee"
    assert "Location: atlanta-ga" in text
    assert "Skills: drive" in text
    assert "Union: SAG-AFTRA" in text


class BatchEmbedder:
    def __init__(self, error=None):
        self.error = error
        self.batches = []

    def embed_many(self, texts):
        self.batches.append(list(texts))
        if self.error:
            raise self.error
        return [[float(i)] * 4 for i in range(len(texts))]


def test_missing_embeddings_are_generated(monkeypatch):
    rows = [make_orm_profile("A"), make_orm_profile("B")]
    stored = []

    async def missing(session, *, limit):
        return rows

    async def set_embedding(session, profile, embedding):
        stored.append((profile.full_name, embedding))
        return profile

    monkeypatch.setattr(profile_repo, "profiles_missing_embedding", missing)
    monkeypatch.setattr(profile_repo, "set_embedding", set_embedding)
    embedder = BatchEmbedder()
    result = asyncio.run(generate_missing_embeddings(None, embedder, limit=10))
    assert result == {"processed": 2, "failed": 0}
    assert [name for name, _ in stored] == ["A", "B"]
    assert len(embedder.batches[0]) == 2


def test_embedding_batch_failure_is_reported(monkeypatch):
    async def missing(session, *, limit):
        return [make_orm_profile("A")]

    monkeypatch.setattr(profile_repo, "profiles_missing_embedding", missing)
    result = asyncio.run(generate_missing_embeddings(None, BatchEmbedder(RuntimeError("quota")), limit=10))
    assert result == {"processed": 0, "failed": 1}
