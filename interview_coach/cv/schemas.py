"""
Schemas for CV analysis and the full CV rewrite.
"""
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field, field_validator

from ..candidate.schemas import profile_response_schema

LATEX_PLACEHOLDER = "% LaTeX source available via PDF download options."


class SuggestedImprovement(BaseModel):
    section: str
    original: str
    suggestion: str
    reason: str
    confidence_score: int = Field(ge=0)


class MissingKeyword(BaseModel):
    keyword: str
    importance: Literal["High", "Medium"]


class CVAnalysisResult(BaseModel):
    """Match analysis of a CV against a job description."""
    match_score: int = Field(ge=0, le=100)
    match_explanation: List[str]
    suggested_improvements: List[SuggestedImprovement]
    critical_additions: List[str]
    missing_keywords: List[MissingKeyword]
    extracted_text: str = ""

    def high_priority_keywords(self) -> List[str]:
        return [k.keyword for k in self.missing_keywords if k.importance == "High"]


class FullCVPreviewResult(BaseModel):
    """A rewritten CV. structured_cv holds the raw profile dict, migrated by the service."""
    structured_cv: Dict[str, Any]
    latex_source: str = LATEX_PLACEHOLDER

    @field_validator("latex_source", mode="before")
    @classmethod
    def _default_latex(cls, value):
        return value or LATEX_PLACEHOLDER


CV_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "match_score": {"type": "INTEGER", "description": "The overall match score from 0-100."},
        "match_explanation": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "An array of strings explaining the score.",
        },
        "suggested_improvements": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "section": {"type": "STRING"},
                    "original": {"type": "STRING"},
                    "suggestion": {"type": "STRING"},
                    "reason": {"type": "STRING"},
                    "confidence_score": {"type": "INTEGER"},
                },
                "required": ["section", "original", "suggestion", "reason", "confidence_score"],
            },
        },
        "critical_additions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "missing_keywords": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "keyword": {"type": "STRING"},
                    "importance": {"type": "STRING", "enum": ["High", "Medium"]},
                },
            },
        },
    },
    "required": ["match_score", "match_explanation", "suggested_improvements",
                 "critical_additions", "missing_keywords"],
}

FULL_CV_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "latex_source": {"type": "STRING"},
        "structured_cv": profile_response_schema(description_as_list=True),
    },
    "required": ["structured_cv"],
}
