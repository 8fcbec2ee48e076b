# stuntpitch/models/__init__.py
from stuntpitch.models.profile import Profile, ProfileSkill, ProfileCertification, ProfilePhoto
from stuntpitch.models.project import ProjectDatabase, ProjectSubmission
from stuntpitch.models.search_log import SearchLog

__all__ = [
    "Profile",
    "ProfileSkill",
    "ProfileCertification",
    "ProfilePhoto",
    "ProjectDatabase",
    "ProjectSubmission",
    "SearchLog",
]
