# Purpose: project databases. Coordinators own projects; performers submit their own profile to one.
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.api.deps import get_current_user
from stuntpitch.db.session import get_async_session
from stuntpitch.models.project import ProjectDatabase
from stuntpitch.repositories import profile_repo, project_repo
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.schemas.project import (
    MySubmissionOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    SubmissionCreate,
    SubmissionOut,
)

logger = logging.getLogger("api.projects")

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _project_out(project, count: int = 0) -> ProjectOut:
    out = ProjectOut.model_validate(project, from_attributes=True)
    return out.model_copy(update={"submission_count": count})


async def _owned_project(db: AsyncSession, project_id: UUID, user_id: str) -> ProjectDatabase:
    project = await project_repo.get_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.creator_user_id != user_id:
        raise HTTPException(status_code=403, detail="Only the project creator can manage this project")
    return project


@router.post("", response_model=ProjectOut, status_code=201)
async def create_project(
    payload: ProjectCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    project = await project_repo.create_project(
        db, name=payload.name.strip(), description=payload.description, creator_user_id=user_id,
    )
    return _project_out(project)


@router.get("/mine", response_model=List[ProjectOut])
async def my_projects(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_async_session)):
    rows = await project_repo.list_projects_with_counts(db, user_id)
    return [_project_out(project, count) for project, count in rows]


@router.get("/my-submissions", response_model=List[MySubmissionOut])
async def my_submissions(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_async_session)):
    """Projects the caller's performer profile has been submitted to, newest first."""
    profile = await profile_repo.get_by_user(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    subs = await project_repo.list_submissions_for_profile(db, profile.id)
    return [
        MySubmissionOut(id=s.id, note=s.note, created_at=s.created_at, project=_project_out(s.project))
        for s in subs
    ]


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: UUID,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    project = await project_repo.get_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return _project_out(project)


@router.patch("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    project = await _owned_project(db, project_id, user_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        if data["name"] is None or not data["name"].strip():
            raise HTTPException(status_code=400, detail="Project name is required")
        data["name"] = data["name"].strip()
    if "description" in data:
        data["description"] = (data["description"] or "").strip() or None
    project = await project_repo.update_project(db, project, data=data)
    logger.info("Project %s updated by %s: %s", project_id, user_id, sorted(data))
    return _project_out(project)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: UUID,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    project = await _owned_project(db, project_id, user_id)
    # submissions go with it (ON DELETE CASCADE)
    await project_repo.delete_project(db, project)
    logger.info("Project %s deleted by %s", project_id, user_id)
    return None


@router.get("/{project_id}/submissions", response_model=List[SubmissionOut])
async def list_submissions(
    project_id: UUID,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await _owned_project(db, project_id, user_id)
    subs = await project_repo.list_submissions(db, project_id)
    return [
        SubmissionOut(
            id=s.id,
            project_id=s.project_id,
            note=s.note,
            created_at=s.created_at,
            profile=ProfileRecord.from_orm_profile(s.profile),
        )
        for s in subs
    ]


@router.post("/{project_id}/submit", status_code=201)
async def submit_profile(
    project_id: UUID,
    payload: SubmissionCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    if await project_repo.get_project(db, project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")
    profile = await profile_repo.get_profile(db, payload.profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    if profile.user_id != user_id:
        raise HTTPException(status_code=403, detail="You can only submit your own profile")
    if await project_repo.get_submission(db, project_id, profile.id) is not None:
        raise HTTPException(status_code=409, detail="Profile already submitted to this project")

    sub = await project_repo.add_submission(db, project_id=project_id, profile_id=profile.id, note=payload.note)
    return {"status": "success", "submission_id": str(sub.id)}
