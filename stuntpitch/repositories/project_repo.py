# stuntpitch/repositories/project_repo.py
from __future__ import annotations
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stuntpitch.models.profile import Profile
from stuntpitch.models.project import ProjectDatabase, ProjectSubmission


async def get_project(session: AsyncSession, project_id: UUID) -> Optional[ProjectDatabase]:
    return await session.get(ProjectDatabase, project_id)


async def create_project(session: AsyncSession, *, name: str, description: Optional[str], creator_user_id: str) -> ProjectDatabase:
    project = ProjectDatabase(name=name, description=description, creator_user_id=creator_user_id)
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return project


async def list_projects_with_counts(session: AsyncSession, user_id: str) -> list[tuple[ProjectDatabase, int]]:
    stmt = (
        select(ProjectDatabase, func.count(ProjectSubmission.id))
        .outerjoin(ProjectSubmission, ProjectSubmission.project_id == ProjectDatabase.id)
        .where(ProjectDatabase.creator_user_id == user_id)
        .group_by(ProjectDatabase.id)
        .order_by(ProjectDatabase.created_at.desc())
    )
    return [(row[0], row[1]) for row in (await session.execute(stmt)).all()]


async def list_submissions(session: AsyncSession, project_id: UUID) -> list[ProjectSubmission]:
    stmt = (
        select(ProjectSubmission)
        .where(ProjectSubmission.project_id == project_id)
        .options(
            selectinload(ProjectSubmission.profile).selectinload(Profile.skills),
            selectinload(ProjectSubmission.profile).selectinload(Profile.certifications),
            selectinload(ProjectSubmission.profile).selectinload(Profile.photos),
        )
        .order_by(ProjectSubmission.created_at.desc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def get_submission(session: AsyncSession, project_id: UUID, profile_id: UUID) -> Optional[ProjectSubmission]:
    stmt = select(ProjectSubmission).where(
        ProjectSubmission.project_id == project_id,
        ProjectSubmission.profile_id == profile_id,
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def add_submission(session: AsyncSession, *, project_id: UUID, profile_id: UUID, note: Optional[str]) -> ProjectSubmission:
    sub = ProjectSubmission(project_id=project_id, profile_id=profile_id, note=note)
    session.add(sub)
    await session.commit()
    await session.refresh(sub)
    return sub


async def update_project(session: AsyncSession, project: ProjectDatabase, *, data: dict) -> ProjectDatabase:
    for key, value in data.items():
        setattr(project, key, value)
    await session.commit()
    await session.refresh(project)
    return project


async def delete_project(session: AsyncSession, project: ProjectDatabase) -> None:
    await session.delete(project)
    await session.commit()


async def list_submissions_for_profile(session: AsyncSession, profile_id: UUID) -> list[ProjectSubmission]:
    stmt = (
        select(ProjectSubmission)
        .where(ProjectSubmission.profile_id == profile_id)
        .options(selectinload(ProjectSubmission.project))
        .order_by(ProjectSubmission.created_at.desc())
    )
    return list((await session.execute(stmt)).scalars().all())
