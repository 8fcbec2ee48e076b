# Purpose: performer profile and its child relations (skills, certifications, photos).
from __future__ import annotations
import uuid
from sqlalchemy import Column, Text, String, Integer, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pgvector.sqlalchemy import Vector
from stuntpitch.db.base import Base


EMBED_DIM = 1536


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    full_name = Column(Text, nullable=False)
    bio = Column(Text, nullable=True)

    # Free-text locations (legacy) plus structured location codes
    location = Column(Text, nullable=True)
    secondary_location = Column(Text, nullable=True)
    primary_location_structured = Column(String(64), nullable=True)
    secondary_location_structured = Column(String(64), nullable=True)

    # Physical attributes; height is stored as separate feet / inches columns
    height_feet = Column(Integer, nullable=True)
    height_inches = Column(Integer, nullable=True)
    weight_lbs = Column(Integer, nullable=True)
    hair_color = Column(String(32), nullable=True)
    eye_color = Column(String(32), nullable=True)
    ethnicity = Column(String(32), nullable=True)
    gender = Column(String(32), nullable=True)

    # Contact & links
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=False)
    website = Column(Text, nullable=True)
    imdb_url = Column(Text, nullable=True)
    reel_url = Column(Text, nullable=True)

    # Resume
    resume_url = Column(Text, nullable=True)
    resume_filename = Column(Text, nullable=True)
    resume_file_size = Column(Integer, nullable=True)
    resume_uploaded_at = Column(DateTime(timezone=True), nullable=True)
    resume_text = Column(Text, nullable=True)

    # Professional
    union_status = Column(String(32), nullable=True)
    availability_status = Column(String(32), nullable=True)
    travel_radius = Column(String(32), nullable=True)

    # Subscription (gates resume analysis when tier mode is on)
    subscription_tier = Column(String(16), nullable=False, default="free")
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    profile_views = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True)

    embedding = Column(Vector(EMBED_DIM), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    skills = relationship("ProfileSkill", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True)
    certifications = relationship("ProfileCertification", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True)
    photos = relationship(
        "ProfilePhoto",
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [ProfilePhoto.is_primary.desc(), ProfilePhoto.sort_order],
    )
    submissions = relationship("ProjectSubmission", back_populates="profile", cascade="all, delete-orphan", passive_deletes=True)


class ProfileSkill(Base):
    __tablename__ = "profile_skills"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    skill_id = Column(String(64), nullable=False)
    proficiency_level = Column(String(32), nullable=True)
    years_experience = Column(Integer, nullable=True)

    profile = relationship("Profile", back_populates="skills")


class ProfileCertification(Base):
    __tablename__ = "profile_certifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    certification_id = Column(String(64), nullable=False)
    date_obtained = Column(Date, nullable=True)
    expiration_date = Column(Date, nullable=True)
    certification_number = Column(Text, nullable=True)

    profile = relationship("Profile", back_populates="certifications")


class ProfilePhoto(Base):
    __tablename__ = "profile_photos"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    file_path = Column(Text, nullable=False)
    file_name = Column(Text, nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="photos")
