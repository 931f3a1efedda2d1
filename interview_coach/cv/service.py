"""
CV alignment: match analysis against a job description and full CV rewrites.
"""
import json
import logging
from typing import List, Sequence, Tuple, Union

from pydantic import ValidationError

from ..config import FAST_MODEL, QUALITY_MODEL, CV_REWRITE_TIMEOUT
from ..errors import MalformedResponseError
from ..candidate.migration import migrate_profile
from ..candidate.models import CandidateProfile, profile_to_text
from ..infrastructure.llm.client import GeminiRestClient, inline_part, text_part
from ..utils.documents import DocumentData
from .schemas import (
    CVAnalysisResult, FullCVPreviewResult, SuggestedImprovement,
    CV_ANALYSIS_SCHEMA, FULL_CV_SCHEMA
)

logger = logging.getLogger("cv_service")

ANALYSIS_INSTRUCTION = """You are an elite career coach and ATS specialist, tasked with rewriting and enhancing a candidate's CV.

GOAL: Compare the CV against the Job Description (JD).

TASKS:
1.  **Match Score:** Calculate a match score (0-100) based on skills, experience, and keywords.
2.  **Explanation:** Explain the score with 3-5 key points.
3.  **Improvements:** Identify 3-5 specific sections to improve.
    -   Provide the *original* text.
    -   Provide a *rewritten suggestion* that uses strong action verbs and metrics.
    -   Explain *why* the change helps (Reason).
    -   Assign a confidence score to your suggestion.
4.  **Critical Additions:** List missing skills or experiences that are crucial for the JD.
5.  **Keywords:** List missing ATS keywords and their importance (High/Medium).

**OUTPUT REQUIREMENTS:**
- The final output MUST be a perfect JSON object matching the schema.
"""

ANALYSIS_TASK = (
    "Analyze the provided cv_text against the job_description. Ground every suggestion in the original CV "
    "content, identifying the specific company/role for each improvement. Identify ATS keywords that are "
    "missing. Adhere strictly to the system instructions and return the analysis in the specified JSON format."
)

EXTRACT_TEXT_PROMPT = "Extract the full text from this document. Preserve the structure."

REWRITE_INSTRUCTION = """You are an expert executive resume writer. Your goal is to **TRANSFORM** a candidate's CV into a high-impact, ATS-optimized document.

**CRITICAL INSTRUCTIONS - READ CAREFULLY:**

1.  **NO HALLUCINATIONS:** You must NOT invent new roles, companies, or dates. Use the existing work history structure from the original CV text.
2.  **IMPROVE, DON'T INVENT:** Your job is to rewrite the *descriptions* of existing roles to be more impactful.
3.  **BULLET POINTS:** Rewrite every description into a list of **distinct, punchy bullet points**.
    -   **Format:** Return them as an ARRAY of strings.
    -   **Style:** Start with a strong Power Verb (e.g., "Orchestrated", "Engineered").
    -   **Structure:** Use "Action + Task + Result" format where possible.
    -   **Length:** Each bullet should be 1-2 lines maximum.
    -   **No Fluff:** Remove generic phrases like "Responsible for".
4.  **MANDATORY FIELDS:** Ensure Name, Email, Phone, LinkedIn, and Location are preserved.
5.  **INTEGRATION:** Seamlessly integrate the provided "Suggested Improvements" and "Keywords" into the bullet points of the relevant roles.
"""

REWRITE_PROMPT = '''ORIGINAL CV TEXT:
"""
{original}
"""

SUGGESTED IMPROVEMENTS TO INTEGRATE:
{improvements}

ADD THESE CRITICAL ITEMS (If applicable to existing roles):
{additions}

WEAVE IN THESE KEYWORDS:
{keywords}
'''

CVInput = Union[DocumentData, CandidateProfile]


class CVService:
    """Analyzes CVs against job descriptions and produces rewritten CVs."""

    def __init__(self, llm_client: GeminiRestClient, rewrite_timeout: float = CV_REWRITE_TIMEOUT):
        self.llm_client = llm_client
        self.rewrite_timeout = rewrite_timeout

    def extract_text(self, doc: DocumentData) -> str:
        text = self.llm_client.generate_text(
            [inline_part(doc.base64, doc.mime_type), text_part(EXTRACT_TEXT_PROMPT)],
            model=FAST_MODEL,
        )
        logger.info("Extracted %d chars of text from %s", len(text), doc.name)
        return text

    def analyze_cv(self, job_description: str, cv_input: CVInput) -> CVAnalysisResult:
        """
        Score a CV (document or stored profile) against a job description.

        A document is first converted to plain text with the fast model; the
        extracted text travels with the result so it can seed a rewrite.

        Raises:
            ValueError: empty job description
            MalformedResponseError: the analysis did not match the schema
        """
        if not job_description or not job_description.strip():
            raise ValueError("A job description is required")

        if isinstance(cv_input, DocumentData):
            cv_text = self.extract_text(cv_input)
        else:
            cv_text = profile_to_text(cv_input)

        data = self.llm_client.generate_json(
            [
                text_part(f"job_description:\n---\n{job_description}\n---\n"),
                text_part(f"\n\ncv_text:\n---\n{cv_text}\n---\n"),
                text_part(f"\n\nYour task:\n{ANALYSIS_TASK}"),
            ],
            response_schema=CV_ANALYSIS_SCHEMA,
            model=QUALITY_MODEL,
            system_instruction=ANALYSIS_INSTRUCTION,
        )
        data["extracted_text"] = cv_text

        try:
            result = CVAnalysisResult.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"CV analysis failed validation: {e}") from e

        logger.info("CV analysis: match=%d, %d improvements, %d missing keywords",
                    result.match_score, len(result.suggested_improvements), len(result.missing_keywords))
        return result

    def generate_full_cv(self,
                         original_text: str,
                         improvements: Sequence[SuggestedImprovement],
                         approved_additions: Sequence[str],
                         approved_keywords: Sequence[str]) -> Tuple[FullCVPreviewResult, CandidateProfile]:
        """
        Rewrite the whole CV with the approved changes woven in.

        Returns the raw preview result and the structured CV migrated into a
        CandidateProfile ready for rendering.
        """
        prompt = REWRITE_PROMPT.format(
            original=original_text,
            improvements=json.dumps([i.model_dump() for i in improvements], indent=2),
            additions=json.dumps(list(approved_additions), indent=2),
            keywords=json.dumps(list(approved_keywords), indent=2),
        )
        logger.info("Generating full CV (%d improvements, %d additions, %d keywords)",
                    len(improvements), len(approved_additions), len(approved_keywords))

        data = self.llm_client.generate_json(
            [text_part(prompt)],
            response_schema=FULL_CV_SCHEMA,
            model=QUALITY_MODEL,
            system_instruction=REWRITE_INSTRUCTION,
            timeout=self.rewrite_timeout,
        )
        try:
            preview = FullCVPreviewResult.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"CV rewrite failed validation: {e}") from e

        return preview, migrate_profile(preview.structured_cv)


def select_changes(result: CVAnalysisResult,
                   min_confidence: int = 0) -> Tuple[List[SuggestedImprovement], List[str], List[str]]:
    """Approve every suggestion at or above min_confidence, all additions and all keywords."""
    improvements = [i for i in result.suggested_improvements if i.confidence_score >= min_confidence]
    return improvements, list(result.critical_additions), [k.keyword for k in result.missing_keywords]
