"""
Candidate profile persistence and AI-assisted CV import.
"""
import logging
from typing import Optional

from ..config import PROFILES_COLLECTION, FAST_MODEL
from ..infrastructure.data.store import DocumentStore, now_timestamp
from ..infrastructure.llm.client import GeminiRestClient, inline_part, text_part
from ..utils.documents import DocumentData
from .migration import migrate_profile
from .models import CandidateProfile
from .schemas import profile_response_schema

logger = logging.getLogger("profile_service")

EXTRACTION_INSTRUCTION = """You are an expert data extraction AI. Extract information from the provided CV document into a structured JSON format.

Rules:
- Extract exact dates where possible (Month Year).
- If a field is missing, leave it as an empty string or empty array.
- For 'description' in experience/education, combine bullet points into a coherent block.
- Separate Degree and Major in Education.
- Extract full details for Certifications including issuer and dates.
"""


class ProfileService:
    """One profile document per user, keyed by lower-cased email."""

    def __init__(self, store: DocumentStore, llm_client: Optional[GeminiRestClient] = None):
        self.store = store
        self.llm_client = llm_client

    def load(self, email: str) -> Optional[CandidateProfile]:
        """Load and migrate a stored profile; None if the user has none."""
        raw = self.store.get(PROFILES_COLLECTION, email.lower())
        if raw is None:
            return None
        return migrate_profile(raw)

    def load_or_empty(self, email: str) -> CandidateProfile:
        return self.load(email) or CandidateProfile.empty(email)

    def save(self, email: str, profile: CandidateProfile) -> None:
        data = profile.to_dict()
        data["updatedAt"] = now_timestamp()
        self.store.set(PROFILES_COLLECTION, email.lower(), data)
        logger.info("Saved profile for %s", email.lower())

    def reset(self, email: str) -> CandidateProfile:
        """Replace the stored profile with an empty one."""
        profile = CandidateProfile.empty(email.lower())
        self.save(email, profile)
        return profile

    def parse_cv_to_profile(self, cv_doc: DocumentData) -> CandidateProfile:
        """Extract a structured profile from a CV document with the fast model."""
        if self.llm_client is None:
            raise RuntimeError("An LLM client is required to import a CV")

        data = self.llm_client.generate_json(
            [inline_part(cv_doc.base64, cv_doc.mime_type), text_part("Extract the structured candidate profile.")],
            response_schema=profile_response_schema(description_as_list=False),
            model=FAST_MODEL,
            system_instruction=EXTRACTION_INSTRUCTION,
        )
        profile = migrate_profile(data)
        logger.info("Extracted profile from %s: %d roles, %d schools, %d skills",
                    cv_doc.name, len(profile.experience), len(profile.education), len(profile.skills))
        return profile

    def import_cv(self, email: str, cv_doc: DocumentData) -> CandidateProfile:
        """Parse a CV and store the result as the user's profile."""
        profile = self.parse_cv_to_profile(cv_doc)
        if not profile.personal_info.email:
            profile.personal_info.email = email.lower()
        self.save(email, profile)
        return profile
