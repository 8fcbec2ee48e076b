# Purpose: performer profile CRUD plus photo and resume uploads. Only the owner may change a profile.
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.api.deps import get_current_user, get_optional_user
from stuntpitch.db.session import get_async_session
from stuntpitch.models.profile import Profile
from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.profile import PhotoItem, ProfileCreate, ProfileRecord, ProfileUpdate
from stuntpitch.services.profiles import service as profile_service
from stuntpitch.services.profiles.service import UploadRejected

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


async def _owned_profile(db: AsyncSession, profile_id: UUID, user_id: str) -> Profile:
    profile = await profile_repo.get_profile(db, profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    if profile.user_id != user_id:
        raise HTTPException(status_code=403, detail="You can only modify your own profile")
    return profile


@router.post("", response_model=ProfileRecord, status_code=201)
async def create_profile(
    payload: ProfileCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    if await profile_repo.get_by_user(db, user_id) is not None:
        raise HTTPException(status_code=409, detail="Profile already exists for this user")
    return await profile_service.create_profile(db, user_id, payload)


@router.get("/{profile_id}", response_model=ProfileRecord)
async def get_profile(
    profile_id: UUID,
    user_id: Optional[str] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
):
    record = await profile_service.view_profile(db, profile_id, viewer_id=user_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return record


@router.patch("/{profile_id}", response_model=ProfileRecord)
async def update_profile(
    profile_id: UUID,
    payload: ProfileUpdate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    profile = await _owned_profile(db, profile_id, user_id)
    return await profile_service.update_profile(db, profile, payload)


@router.delete("/{profile_id}", status_code=204)
async def delete_profile(
    profile_id: UUID,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    profile = await _owned_profile(db, profile_id, user_id)
    await profile_service.delete_profile(db, profile)
    return None


@router.post("/{profile_id}/photos", response_model=PhotoItem, status_code=201)
async def upload_photo(
    profile_id: UUID,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    profile = await _owned_profile(db, profile_id, user_id)
    content = await file.read()
    try:
        photo = await profile_service.add_photo(
            db, profile, content=content, filename=file.filename or "photo", content_type=file.content_type,
        )
    except UploadRejected as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PhotoItem.model_validate(photo, from_attributes=True)


@router.delete("/{profile_id}/photos/{photo_id}", status_code=204)
async def delete_photo(
    profile_id: UUID,
    photo_id: UUID,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await _owned_profile(db, profile_id, user_id)
    photo = await profile_repo.get_photo(db, profile_id, photo_id)
    if photo is None:
        raise HTTPException(status_code=404, detail="Photo not found")
    await profile_service.delete_photo(db, photo)
    return None


@router.post("/{profile_id}/resume", response_model=ProfileRecord)
async def upload_resume(
    profile_id: UUID,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    profile = await _owned_profile(db, profile_id, user_id)
    content = await file.read()
    try:
        return await profile_service.upload_resume(
            db, profile, content=content, filename=file.filename or "resume", content_type=file.content_type,
        )
    except UploadRejected as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
