"""
Data models for the structured candidate profile.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..config import PROFILE_SCHEMA_VERSION


@dataclass
class PersonalInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    portfolio: str = ""

    def contact_parts(self) -> List[str]:
        """Non-empty contact fields in display order."""
        values = [self.phone, self.email, self.location, self.linkedin, self.portfolio]
        return [v.strip() for v in values if v and v.strip()]


@dataclass
class WorkExperience:
    id: str
    company: str = ""
    role: str = ""
    start_date: str = ""
    end_date: str = ""
    description: List[str] = field(default_factory=list)


@dataclass
class Education:
    id: str
    institution: str = ""
    degree: str = ""
    major: str = ""
    start_date: str = ""
    end_date: str = ""
    description: List[str] = field(default_factory=list)


@dataclass
class Project:
    id: str
    name: str = ""
    description: List[str] = field(default_factory=list)
    link: str = ""


@dataclass
class Certification:
    id: str
    name: str = ""
    issuer: str = ""
    start_date: str = ""
    expiration_date: str = ""
    credential_id: str = ""
    url: str = ""


@dataclass
class CandidateProfile:
    """A candidate's career profile. Descriptions are always bullet lists."""
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str = ""
    experience: List[WorkExperience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    certifications: List[Certification] = field(default_factory=list)
    schema_version: int = PROFILE_SCHEMA_VERSION

    @classmethod
    def empty(cls, email: str = "") -> 'CandidateProfile':
        return cls(personal_info=PersonalInfo(email=email))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase field names used in storage and prompts."""
        p = self.personal_info
        return {
            "schemaVersion": self.schema_version,
            "personalInfo": {
                "name": p.name, "email": p.email, "phone": p.phone,
                "location": p.location, "linkedin": p.linkedin, "portfolio": p.portfolio,
            },
            "summary": self.summary,
            "experience": [
                {"id": e.id, "company": e.company, "role": e.role, "startDate": e.start_date,
                 "endDate": e.end_date, "description": list(e.description)}
                for e in self.experience
            ],
            "education": [
                {"id": e.id, "institution": e.institution, "degree": e.degree, "major": e.major,
                 "startDate": e.start_date, "endDate": e.end_date, "description": list(e.description)}
                for e in self.education
            ],
            "skills": list(self.skills),
            "projects": [
                {"id": p.id, "name": p.name, "description": list(p.description), "link": p.link}
                for p in self.projects
            ],
            "certifications": [
                {"id": c.id, "name": c.name, "issuer": c.issuer, "startDate": c.start_date,
                 "expirationDate": c.expiration_date, "credentialId": c.credential_id, "url": c.url}
                for c in self.certifications
            ],
        }


def _bullets(lines: List[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def profile_to_text(profile: CandidateProfile) -> str:
    """Plain-text rendering of a profile, used as prompt context."""
    info = profile.personal_info
    text = f"Name: {info.name}\nEmail: {info.email}\n"
    if info.phone:
        text += f"Phone: {info.phone}\n"
    if info.location:
        text += f"Location: {info.location}\n"
    if info.linkedin:
        text += f"LinkedIn: {info.linkedin}\n"
    if info.portfolio:
        text += f"Portfolio: {info.portfolio}\n"

    text += f"\nPROFESSIONAL SUMMARY\n{profile.summary}\n\n"

    text += "EXPERIENCE\n"
    for exp in profile.experience:
        text += f"{exp.role} at {exp.company} ({exp.start_date} - {exp.end_date})\n{_bullets(exp.description)}\n\n"

    text += "EDUCATION\n"
    for edu in profile.education:
        text += f"{edu.degree} in {edu.major} from {edu.institution} ({edu.start_date} - {edu.end_date})\n"
        if edu.description:
            text += f"{_bullets(edu.description)}\n"

    text += f"\nSKILLS\n{', '.join(profile.skills)}\n"

    if profile.projects:
        text += "\nPROJECTS\n"
        for proj in profile.projects:
            link = f" ({proj.link})" if proj.link else ""
            text += f"{proj.name}:{link}\n{_bullets(proj.description)}\n"

    if profile.certifications:
        text += "\nCERTIFICATIONS\n"
        for cert in profile.certifications:
            text += f"{cert.name} - {cert.issuer} ({cert.start_date})"
            if cert.credential_id:
                text += f" ID: {cert.credential_id}"
            if cert.url:
                text += f" URL: {cert.url}"
            text += "\n"

    return text
