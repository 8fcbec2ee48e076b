# stuntpitch/repositories/profile_repo.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stuntpitch.models.profile import Profile, ProfileCertification, ProfilePhoto, ProfileSkill
from stuntpitch.models.project import ProjectSubmission


def with_relations(stmt: Select) -> Select:
    """Eager-load the child relations ProfileRecord needs."""
    return stmt.options(
        selectinload(Profile.skills),
        selectinload(Profile.certifications),
        selectinload(Profile.photos),
    )


async def get_profile(session: AsyncSession, profile_id: UUID) -> Optional[Profile]:
    stmt = with_relations(select(Profile).where(Profile.id == profile_id)).execution_options(populate_existing=True)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_by_user(session: AsyncSession, user_id: str) -> Optional[Profile]:
    stmt = with_relations(select(Profile).where(Profile.user_id == user_id).order_by(Profile.created_at))
    return (await session.execute(stmt)).scalars().first()


async def submitted_profile_ids(session: AsyncSession, project_id: UUID) -> list[UUID]:
    stmt = select(ProjectSubmission.profile_id).where(ProjectSubmission.project_id == project_id)
    return list((await session.execute(stmt)).scalars().all())


async def public_profiles(session: AsyncSession, *, limit: int = 20) -> list[Profile]:
    stmt = with_relations(select(Profile).where(Profile.is_public.is_(True)).limit(limit))
    return list((await session.execute(stmt)).scalars().all())


async def search_by_name(
    session: AsyncSession,
    names: Iterable[str],
    *,
    project_id: Optional[UUID] = None,
    limit: int = 10,
) -> list[Profile]:
    """Exact full-name matches first, then contains, then per-part matches (parts > 2 chars)."""
    exact, partial = [], []
    for name in names:
        exact.append(Profile.full_name.ilike(name))
        partial.append(Profile.full_name.ilike(f"%{name}%"))
        parts = name.split()
        if len(parts) > 1:
            partial.extend(Profile.full_name.ilike(f"%{p}%") for p in parts if len(p) > 2)
    if not exact:
        return []

    stmt = select(Profile).where(Profile.is_public.is_(True), or_(*exact, *partial))
    if project_id is not None:
        stmt = stmt.where(
            Profile.id.in_(select(ProjectSubmission.profile_id).where(ProjectSubmission.project_id == project_id))
        )
    # exact hits sort ahead of partial ones
    stmt = stmt.order_by(or_(*exact).desc(), Profile.full_name).limit(limit)
    return list((await session.execute(with_relations(stmt))).scalars().all())


async def vector_search(
    session: AsyncSession,
    embedding: Sequence[float],
    *,
    limit: int = 20,
    profile_ids: Optional[Sequence[UUID]] = None,
) -> list[Profile]:
    """Nearest public profiles by cosine distance on `profiles.embedding`."""
    stmt = select(Profile).where(Profile.is_public.is_(True), Profile.embedding.is_not(None))
    if profile_ids is not None:
        stmt = stmt.where(Profile.id.in_(list(profile_ids)))
    stmt = stmt.order_by(Profile.embedding.cosine_distance(list(embedding))).limit(limit)
    return list((await session.execute(with_relations(stmt))).scalars().all())


async def profiles_missing_embedding(session: AsyncSession, *, limit: int = 100) -> list[Profile]:
    stmt = with_relations(
        select(Profile).where(Profile.is_public.is_(True), Profile.embedding.is_(None)).limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


async def set_embedding(session: AsyncSession, profile: Profile, embedding: list[float]) -> Profile:
    profile.embedding = embedding
    session.add(profile)
    await session.commit()
    return profile


async def increment_views(session: AsyncSession, profile_id: UUID) -> None:
    await session.execute(
        update(Profile).where(Profile.id == profile_id).values(profile_views=Profile.profile_views + 1)
    )
    await session.commit()


def _replace_children(profile: Profile, skills, certifications) -> None:
    if skills is not None:
        profile.skills = [ProfileSkill(**s.model_dump()) for s in skills]
    if certifications is not None:
        profile.certifications = [ProfileCertification(**c.model_dump()) for c in certifications]


async def create_profile(session: AsyncSession, *, user_id: str, data: dict, skills=None, certifications=None) -> Profile:
    profile = Profile(user_id=user_id, **data)
    profile.skills = []
    profile.certifications = []
    profile.photos = []
    _replace_children(profile, skills, certifications)
    session.add(profile)
    await session.commit()
    return await get_profile(session, profile.id)


async def update_profile(session: AsyncSession, profile: Profile, *, data: dict, skills=None, certifications=None) -> Profile:
    for key, value in data.items():
        setattr(profile, key, value)
    _replace_children(profile, skills, certifications)
    session.add(profile)
    await session.commit()
    return await get_profile(session, profile.id)


async def delete_profile(session: AsyncSession, profile: Profile) -> None:
    await session.delete(profile)
    await session.commit()


async def add_photo(session: AsyncSession, profile: Profile, *, file_path: str, file_name: str) -> ProfilePhoto:
    count = (await session.execute(
        select(func.count(ProfilePhoto.id)).where(ProfilePhoto.profile_id == profile.id)
    )).scalar_one()
    photo = ProfilePhoto(
        profile_id=profile.id,
        file_path=file_path,
        file_name=file_name,
        is_primary=count == 0,
        sort_order=count,
    )
    session.add(photo)
    await session.commit()
    await session.refresh(photo)
    return photo


async def get_photo(session: AsyncSession, profile_id: UUID, photo_id: UUID) -> Optional[ProfilePhoto]:
    stmt = select(ProfilePhoto).where(ProfilePhoto.id == photo_id, ProfilePhoto.profile_id == profile_id)
    return (await session.execute(stmt)).scalar_one_or_none()


async def delete_photo(session: AsyncSession, photo: ProfilePhoto) -> None:
    """Delete a photo; if it was primary, promote the next one."""
    profile_id, was_primary = photo.profile_id, photo.is_primary
    await session.delete(photo)
    await session.flush()
    if was_primary:
        nxt = (await session.execute(
            select(ProfilePhoto).where(ProfilePhoto.profile_id == profile_id).order_by(ProfilePhoto.sort_order).limit(1)
        )).scalar_one_or_none()
        if nxt is not None:
            nxt.is_primary = True
            session.add(nxt)
    await session.commit()


async def attach_resume(
    session: AsyncSession,
    profile: Profile,
    *,
    resume_url: str,
    filename: str,
    file_size: int,
    resume_text: Optional[str],
) -> Profile:
    profile.resume_url = resume_url
    profile.resume_filename = filename
    profile.resume_file_size = file_size
    profile.resume_uploaded_at = datetime.now(timezone.utc)
    profile.resume_text = resume_text
    session.add(profile)
    await session.commit()
    return await get_profile(session, profile.id)
