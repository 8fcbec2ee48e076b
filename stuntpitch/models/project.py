from __future__ import annotations

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stuntpitch.db.base import Base


class ProjectDatabase(Base):
    """
    A coordinator-owned production. Its submissions form a private subset of
    profiles that chat and filter search can be scoped to.
    """
    __tablename__ = "project_databases"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    creator_user_id = Column(Text, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    submissions = relationship("ProjectSubmission", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)


class ProjectSubmission(Base):
    """Join table: a performer profile submitted to a project."""
    __tablename__ = "project_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    project_id = Column(UUID(as_uuid=True), ForeignKey("project_databases.id", ondelete="CASCADE"), nullable=False, index=True)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project = relationship("ProjectDatabase", back_populates="submissions")
    profile = relationship("Profile", back_populates="submissions")

    __table_args__ = (
        UniqueConstraint('project_id', 'profile_id', name='uq_project_submission_project_profile'),
    )
