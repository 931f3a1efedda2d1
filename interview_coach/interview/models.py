"""
Data models for the mock interview.

Sessions and turns are immutable; the state machine produces a new session
for every transition.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..config import NOMINAL_QUESTION_COUNT, PLACEHOLDER_FEEDBACK
from ..candidate.models import CandidateProfile
from ..utils.documents import DocumentData

SOURCES = ("JD", "CandidateProfile", "Mixed")


class InterviewStatus(str, Enum):
    """Lifecycle of one interview session."""
    INITIALIZING = "initializing"
    AWAITING_QUESTION = "awaiting_question"
    AWAITING_AUDIO_GENERATION = "awaiting_audio_generation"
    PLAYING_QUESTION = "playing_question"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    AWAITING_ANALYSIS = "awaiting_analysis"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (InterviewStatus.COMPLETE, InterviewStatus.FAILED)


@dataclass(frozen=True)
class Scores:
    """Per-answer scores, each 1..5."""
    relevance: int = 1
    structure: int = 1
    metrics: int = 1
    alignment: int = 1
    communication: int = 1

    @classmethod
    def placeholder(cls) -> 'Scores':
        return cls()

    def to_dict(self) -> Dict[str, int]:
        return {
            "relevance": self.relevance,
            "structure": self.structure,
            "metrics": self.metrics,
            "alignment": self.alignment,
            "communication": self.communication,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scores':
        return cls(**{k: int(data.get(k, 1)) for k in cls().to_dict()})


@dataclass(frozen=True)
class Turn:
    """One question and, once given, its answer and analysis."""
    question_number: int
    question: str
    source_of_question: str = "Mixed"
    candidate_answer: str = ""
    quick_feedback: str = PLACEHOLDER_FEEDBACK
    scores: Scores = field(default_factory=Scores.placeholder)
    analyzed: bool = False

    def with_answer(self, answer: str) -> 'Turn':
        return replace(self, candidate_answer=answer)

    def with_analysis(self, quick_feedback: str, scores: Scores) -> 'Turn':
        return replace(self, quick_feedback=quick_feedback, scores=scores, analyzed=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionNumber": self.question_number,
            "question": self.question,
            "sourceOfQuestion": self.source_of_question,
            "candidateAnswer": self.candidate_answer,
            "quickFeedback": self.quick_feedback,
            "scores": self.scores.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Turn':
        feedback = data.get("quickFeedback") or PLACEHOLDER_FEEDBACK
        return cls(
            question_number=int(data["questionNumber"]),
            question=data.get("question", ""),
            source_of_question=data.get("sourceOfQuestion", "Mixed"),
            candidate_answer=data.get("candidateAnswer", ""),
            quick_feedback=feedback,
            scores=Scores.from_dict(data.get("scores") or {}),
            analyzed=feedback != PLACEHOLDER_FEEDBACK,
        )


@dataclass(frozen=True)
class Improvement:
    point: str
    suggestion: str


@dataclass(frozen=True)
class ReportSummary:
    company_detected: str
    role_detected: str
    overall_score: int
    top_strengths: Tuple[str, ...] = ()
    top_improvements: Tuple[Improvement, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "companyDetected": self.company_detected,
            "roleDetected": self.role_detected,
            "overallScore": self.overall_score,
            "topStrengths": list(self.top_strengths),
            "topImprovements": [{"point": i.point, "suggestion": i.suggestion} for i in self.top_improvements],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReportSummary':
        return cls(
            company_detected=data.get("companyDetected", ""),
            role_detected=data.get("roleDetected", ""),
            overall_score=int(data.get("overallScore", 0)),
            top_strengths=tuple(data.get("topStrengths") or ()),
            top_improvements=tuple(
                Improvement(i.get("point", ""), i.get("suggestion", "")) for i in data.get("topImprovements") or ()
            ),
        )


@dataclass(frozen=True)
class InterviewReport:
    """Terminal artifact of a completed interview."""
    summary: ReportSummary
    transcript: Tuple[Turn, ...]
    downloadable_transcript_markdown: str = ""
    downloadable_report_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "transcript": [t.to_dict() for t in self.transcript],
            "downloadableTranscriptMarkdown": self.downloadable_transcript_markdown,
            "downloadableReportText": self.downloadable_report_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InterviewReport':
        return cls(
            summary=ReportSummary.from_dict(data.get("summary") or {}),
            transcript=tuple(Turn.from_dict(t) for t in data.get("transcript") or ()),
            downloadable_transcript_markdown=data.get("downloadableTranscriptMarkdown", ""),
            downloadable_report_text=data.get("downloadableReportText", ""),
        )


@dataclass(frozen=True)
class InterviewInputs:
    """Immutable inputs: the job description plus CV material."""
    job_description: str
    cv: Optional[DocumentData] = None
    linkedin: Optional[DocumentData] = None
    profile: Optional[CandidateProfile] = None

    def __post_init__(self):
        if not self.job_description or not self.job_description.strip():
            raise ValueError("A job description is required")
        if self.cv is None and self.profile is None:
            raise ValueError("Either a CV document or a candidate profile is required")


@dataclass(frozen=True)
class InterviewSession:
    """Everything the orchestrator knows about one interview."""
    inputs: InterviewInputs
    transcript: Tuple[Turn, ...] = ()
    status: InterviewStatus = InterviewStatus.INITIALIZING
    current_question_number: int = 0
    current_question_text: str = ""
    report: Optional[InterviewReport] = None
    error_message: Optional[str] = None
    warning: Optional[str] = None

    @property
    def progress_percent(self) -> int:
        """Cosmetic progress against the nominal question count."""
        return min(100, round(len(self.transcript) / NOMINAL_QUESTION_COUNT * 100))
