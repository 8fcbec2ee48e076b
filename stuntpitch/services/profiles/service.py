from __future__ import annotations

import asyncio
import hashlib
import logging
import shutil
from functools import partial
from pathlib import Path
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.core.config import settings
from stuntpitch.models.profile import Profile, ProfilePhoto
from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.profile import ProfileCreate, ProfileRecord, ProfileUpdate
from stuntpitch.services.resumes.text_extraction import extract_text

logger = logging.getLogger("profiles.service")

PHOTO_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
PHOTO_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
RESUME_SUFFIXES = {".pdf", ".docx", ".txt"}
CHILD_FIELDS = {"skills", "certifications"}


class UploadRejected(ValueError):
    """Upload failed validation (type or size). `status_code` is the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def sha256_of_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _store(data: bytes, *, folder: str, profile_id: UUID, filename: str) -> str:
    """Write under STORAGE_DIR/<folder>/<profile_id>/; return the storage-relative path."""
    suffix = Path(filename).suffix.lower()
    relative = Path(folder) / str(profile_id) / f"{sha256_of_bytes(data)[:16]}{suffix}"
    target = Path(settings.STORAGE_DIR) / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return relative.as_posix()


def _remove_stored(relative: str) -> None:
    path = Path(settings.STORAGE_DIR) / relative
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove stored file %s: %s", path, e)


def _remove_profile_files(profile_id: UUID) -> None:
    for folder in ("photos", "resumes"):
        directory = Path(settings.STORAGE_DIR) / folder / str(profile_id)
        if not directory.exists():
            continue
        try:
            shutil.rmtree(directory)
        except OSError as e:
            logger.warning("Could not remove stored files under %s: %s", directory, e)


async def create_profile(session: AsyncSession, user_id: str, payload: ProfileCreate) -> ProfileRecord:
    data = payload.model_dump(exclude_none=True, exclude=CHILD_FIELDS)
    profile = await profile_repo.create_profile(
        session, user_id=user_id, data=data, skills=payload.skills, certifications=payload.certifications,
    )
    logger.info("Created profile %s for user %s", profile.id, user_id)
    return ProfileRecord.from_orm_profile(profile)


async def update_profile(session: AsyncSession, profile: Profile, payload: ProfileUpdate) -> ProfileRecord:
    data = payload.model_dump(exclude_unset=True, exclude=CHILD_FIELDS)
    updated = await profile_repo.update_profile(
        session, profile, data=data, skills=payload.skills, certifications=payload.certifications,
    )
    logger.info("Updated profile %s (%s)", profile.id, ", ".join(sorted(data)) or "children only")
    return ProfileRecord.from_orm_profile(updated)


async def view_profile(session: AsyncSession, profile_id: UUID, viewer_id: Optional[str] = None) -> Optional[ProfileRecord]:
    """Load a profile the viewer may see and count the view. Private profiles are visible to their owner only."""
    profile = await profile_repo.get_profile(session, profile_id)
    if profile is None or (not profile.is_public and profile.user_id != viewer_id):
        return None
    await profile_repo.increment_views(session, profile_id)
    profile = await profile_repo.get_profile(session, profile_id)
    return ProfileRecord.from_orm_profile(profile)


async def add_photo(
    session: AsyncSession,
    profile: Profile,
    *,
    content: bytes,
    filename: str,
    content_type: Optional[str],
) -> ProfilePhoto:
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype not in PHOTO_TYPES and Path(filename).suffix.lower() not in PHOTO_SUFFIXES:
        raise UploadRejected(f"Unsupported image type: {content_type or filename}")
    if not content:
        raise UploadRejected("Empty file")
    if len(content) > settings.MAX_PHOTO_BYTES:
        raise UploadRejected(f"Photo exceeds {settings.MAX_PHOTO_BYTES} bytes", status_code=413)

    relative = _store(content, folder="photos", profile_id=profile.id, filename=filename)
    photo = await profile_repo.add_photo(session, profile, file_path=relative, file_name=filename)
    logger.info("Stored photo %s for profile %s (primary=%s)", relative, profile.id, photo.is_primary)
    return photo


async def delete_profile(session: AsyncSession, profile: Profile) -> None:
    """Delete the profile (children cascade), then its uploaded photos and resumes."""
    profile_id = profile.id
    await profile_repo.delete_profile(session, profile)
    _remove_profile_files(profile_id)
    logger.info("Deleted profile %s and its stored files", profile_id)


async def delete_photo(session: AsyncSession, photo: ProfilePhoto) -> None:
    file_path = photo.file_path
    await profile_repo.delete_photo(session, photo)
    _remove_stored(file_path)


async def upload_resume(
    session: AsyncSession,
    profile: Profile,
    *,
    content: bytes,
    filename: str,
    content_type: Optional[str],
) -> ProfileRecord:
    if Path(filename).suffix.lower() not in RESUME_SUFFIXES:
        raise UploadRejected("Resume must be a PDF, DOCX or TXT file")
    if not content:
        raise UploadRejected("Empty file")
    if len(content) > settings.MAX_RESUME_BYTES:
        raise UploadRejected(f"Resume exceeds {settings.MAX_RESUME_BYTES} bytes", status_code=413)

    loop = asyncio.get_running_loop()
    try:
        text = await loop.run_in_executor(
            None, partial(extract_text, content, filename=filename, content_type=content_type)
        )
    except ValueError as e:
        raise UploadRejected(str(e)) from e
    except Exception as e:
        # Keep the file; analysis will simply find no text
        logger.warning("Resume text extraction failed for %s: %s", filename, e)
        text = None

    relative = _store(content, folder="resumes", profile_id=profile.id, filename=filename)
    updated = await profile_repo.attach_resume(
        session,
        profile,
        resume_url=relative,
        filename=filename,
        file_size=len(content),
        resume_text=(text or "").strip() or None,
    )
    logger.info("Stored resume %s for profile %s (%d chars of text)", relative, profile.id, len(text or ""))
    return ProfileRecord.from_orm_profile(updated)
