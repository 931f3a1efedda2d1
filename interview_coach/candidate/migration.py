"""
Load-time migration of stored or extracted profile documents.

Profiles written by earlier versions (and raw AI extractions) come in several
shapes. migrate_profile() accepts any of them and always returns a current
CandidateProfile:

  v0/v1 (no schemaVersion):
    - list items may lack ids
    - descriptions may be a single string or a list
    - education may carry "year" instead of "endDate" and miss other fields
    - certifications may be plain strings
    - skills / projects / certifications may be missing entirely
  v2: the current shape, see CandidateProfile.to_dict()
"""
import re
import uuid
import logging
from typing import Any, Dict, List

from ..config import PROFILE_SCHEMA_VERSION
from .models import (
    CandidateProfile, PersonalInfo, WorkExperience, Education, Project, Certification
)

logger = logging.getLogger("profile_migration")

_BULLET_PREFIX = re.compile(r"^[\-\*•]\s*")


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_description(value: Any) -> List[str]:
    """Coerce a string-or-list description into a list of bullet strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [_str(v) for v in value]
    else:
        items = re.split(r"\n|•", str(value))
    bullets = []
    for item in items:
        cleaned = _BULLET_PREFIX.sub("", item.strip()).strip()
        if cleaned:
            bullets.append(cleaned)
    return bullets


def _migrate_certifications(raw: Any) -> List[Certification]:
    certs = []
    for item in raw or []:
        if isinstance(item, str):
            if item.strip():
                certs.append(Certification(id=generate_id(), name=item.strip()))
            continue
        if not isinstance(item, dict):
            continue
        certs.append(Certification(
            id=_str(item.get("id")) or generate_id(),
            name=_str(item.get("name")),
            issuer=_str(item.get("issuer")),
            start_date=_str(item.get("startDate")),
            expiration_date=_str(item.get("expirationDate")),
            credential_id=_str(item.get("credentialId")),
            url=_str(item.get("url")),
        ))
    return certs


def _schema_version(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


def migrate_profile(raw: Dict[str, Any]) -> CandidateProfile:
    """Bring any known profile shape up to the current schema version."""
    raw = raw or {}
    version = _schema_version(raw.get("schemaVersion"))
    if version > PROFILE_SCHEMA_VERSION:
        logger.warning("Profile schemaVersion %s is newer than supported %s; loading best-effort",
                       version, PROFILE_SCHEMA_VERSION)

    info = raw.get("personalInfo") or {}
    personal_info = PersonalInfo(
        name=_str(info.get("name")),
        email=_str(info.get("email")),
        phone=_str(info.get("phone")),
        location=_str(info.get("location")),
        linkedin=_str(info.get("linkedin")),
        portfolio=_str(info.get("portfolio")),
    )

    experience = [
        WorkExperience(
            id=_str(e.get("id")) or generate_id(),
            company=_str(e.get("company")),
            role=_str(e.get("role")),
            start_date=_str(e.get("startDate")),
            end_date=_str(e.get("endDate")),
            description=normalize_description(e.get("description")),
        )
        for e in raw.get("experience") or [] if isinstance(e, dict)
    ]

    education = [
        Education(
            id=_str(e.get("id")) or generate_id(),
            institution=_str(e.get("institution")),
            degree=_str(e.get("degree")),
            major=_str(e.get("major")),
            start_date=_str(e.get("startDate")),
            end_date=_str(e.get("endDate")) or _str(e.get("year")),
            description=normalize_description(e.get("description")),
        )
        for e in raw.get("education") or [] if isinstance(e, dict)
    ]

    projects = [
        Project(
            id=_str(p.get("id")) or generate_id(),
            name=_str(p.get("name")),
            description=normalize_description(p.get("description")),
            link=_str(p.get("link")),
        )
        for p in raw.get("projects") or [] if isinstance(p, dict)
    ]

    skills = [_str(s) for s in raw.get("skills") or [] if _str(s)]

    if version < PROFILE_SCHEMA_VERSION:
        logger.debug("Migrated profile for '%s' from v%s to v%s",
                     personal_info.email, version, PROFILE_SCHEMA_VERSION)

    return CandidateProfile(
        personal_info=personal_info,
        summary=_str(raw.get("summary")),
        experience=experience,
        education=education,
        skills=skills,
        projects=projects,
        certifications=_migrate_certifications(raw.get("certifications")),
        schema_version=PROFILE_SCHEMA_VERSION,
    )
