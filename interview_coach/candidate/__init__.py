"""Candidate profile: models, legacy migration and persistence."""

from .models import (
    CandidateProfile, PersonalInfo, WorkExperience, Education, Project, Certification,
    profile_to_text,
)
from .migration import migrate_profile, normalize_description
from .service import ProfileService

__all__ = [
    "CandidateProfile", "PersonalInfo", "WorkExperience", "Education", "Project", "Certification",
    "profile_to_text", "migrate_profile", "normalize_description", "ProfileService",
]
