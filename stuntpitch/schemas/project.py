# stuntpitch/schemas/project.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from stuntpitch.schemas.profile import ProfileRecord


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    creator_user_id: str
    created_at: datetime
    submission_count: int = 0


class SubmissionCreate(BaseModel):
    profile_id: UUID
    note: Optional[str] = Field(None, max_length=2000)


class SubmissionOut(BaseModel):
    id: UUID
    project_id: UUID
    note: Optional[str] = None
    created_at: datetime
    profile: ProfileRecord


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class MySubmissionOut(BaseModel):
    """A performer's own submission, with the project it went to."""
    id: UUID
    note: Optional[str] = None
    created_at: datetime
    project: ProjectOut
