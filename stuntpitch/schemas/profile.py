# stuntpitch/schemas/profile.py
"""Profile records crossing the DB boundary, plus create/update payloads.

`ProfileRecord` is built once from the ORM row (`from_orm_profile`) and is what every
casting stage consumes; nothing downstream touches ORM objects or ad-hoc dicts.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stuntpitch.constants.casting import (
    AVAILABILITY_VALUES,
    GENDERS,
    SUBSCRIPTION_TIERS,
    TRAVEL_RADIUS_ORDER,
)
from stuntpitch.constants.ethnicity import ETHNICITY_VALUES, normalize_ethnicity
from stuntpitch.constants.locations import LOCATION_VALUES


class SkillItem(BaseModel):
    skill_id: str
    proficiency_level: Optional[str] = None
    years_experience: Optional[int] = Field(None, ge=0)


class CertificationItem(BaseModel):
    certification_id: str
    date_obtained: Optional[date] = None
    expiration_date: Optional[date] = None
    certification_number: Optional[str] = None


class PhotoItem(BaseModel):
    id: Optional[UUID] = None
    file_path: str
    file_name: Optional[str] = None
    is_primary: bool = False
    sort_order: int = 0


class ProfileRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    full_name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    secondary_location: Optional[str] = None
    primary_location_structured: Optional[str] = None
    secondary_location_structured: Optional[str] = None
    height_feet: Optional[int] = None
    height_inches: Optional[int] = None
    weight_lbs: Optional[int] = None
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    ethnicity: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    imdb_url: Optional[str] = None
    reel_url: Optional[str] = None
    resume_url: Optional[str] = None
    resume_filename: Optional[str] = None
    union_status: Optional[str] = None
    availability_status: Optional[str] = None
    travel_radius: Optional[str] = None
    subscription_tier: str = "free"
    subscription_expires_at: Optional[datetime] = None
    profile_views: int = 0
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    profile_skills: list[SkillItem] = Field(default_factory=list)
    profile_certifications: list[CertificationItem] = Field(default_factory=list)
    profile_photos: list[PhotoItem] = Field(default_factory=list)

    # Loaded for resume analysis only; never sent to clients
    resume_text: Optional[str] = Field(default=None, exclude=True)

    @classmethod
    def from_orm_profile(cls, profile, *, with_relations: bool = True) -> "ProfileRecord":
        """Build the record from a `models.Profile` row (relations must be eager-loaded)."""
        data = {
            column: getattr(profile, column)
            for column in cls.model_fields
            if column not in {"id", "profile_skills", "profile_certifications", "profile_photos"}
            and hasattr(profile, column)
        }
        data["id"] = str(profile.id)
        if with_relations:
            data["profile_skills"] = [SkillItem.model_validate(s, from_attributes=True) for s in profile.skills]
            data["profile_certifications"] = [CertificationItem.model_validate(c, from_attributes=True) for c in profile.certifications]
            data["profile_photos"] = [PhotoItem.model_validate(p, from_attributes=True) for p in profile.photos]
        return cls(**data)

    @property
    def height_total_inches(self) -> Optional[int]:
        if self.height_feet is None:
            return None
        return self.height_feet * 12 + (self.height_inches or 0)

    @property
    def skill_ids(self) -> list[str]:
        return [s.skill_id for s in self.profile_skills]


class ProfileBase(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    bio: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = None
    secondary_location: Optional[str] = None
    primary_location_structured: Optional[str] = None
    secondary_location_structured: Optional[str] = None
    height_feet: Optional[int] = Field(None, ge=3, le=8)
    height_inches: Optional[int] = Field(None, ge=0, le=11)
    weight_lbs: Optional[int] = Field(None, ge=50, le=500)
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    ethnicity: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    imdb_url: Optional[str] = None
    reel_url: Optional[str] = None
    union_status: Optional[str] = None
    availability_status: Optional[str] = None
    travel_radius: Optional[str] = None
    is_public: Optional[bool] = None
    skills: Optional[list[SkillItem]] = None
    certifications: Optional[list[CertificationItem]] = None

    @field_validator("primary_location_structured", "secondary_location_structured")
    @classmethod
    def _known_location(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in LOCATION_VALUES:
            raise ValueError(f"Unknown location code '{v}'")
        return v

    @field_validator("ethnicity")
    @classmethod
    def _known_ethnicity(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        code = normalize_ethnicity(v)
        if code is None:
            raise ValueError(f"Ethnicity must be one of {', '.join(ETHNICITY_VALUES)}")
        return code

    @field_validator("gender")
    @classmethod
    def _known_gender(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GENDERS:
            raise ValueError(f"Gender must be one of {', '.join(GENDERS)}")
        return v

    @field_validator("availability_status")
    @classmethod
    def _known_availability(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in AVAILABILITY_VALUES:
            raise ValueError(f"Availability must be one of {', '.join(AVAILABILITY_VALUES)}")
        return v

    @field_validator("travel_radius")
    @classmethod
    def _known_radius(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TRAVEL_RADIUS_ORDER:
            raise ValueError(f"Travel radius must be one of {', '.join(TRAVEL_RADIUS_ORDER)}")
        return v


class ProfileCreate(ProfileBase):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3)


class ProfileUpdate(ProfileBase):
    subscription_tier: Optional[str] = None

    @field_validator("subscription_tier")
    @classmethod
    def _known_tier(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SUBSCRIPTION_TIERS:
            raise ValueError(f"Tier must be one of {', '.join(SUBSCRIPTION_TIERS)}")
        return v
