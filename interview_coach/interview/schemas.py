"""
Wire schemas for turn generation and strict parsing of the model's replies.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import MalformedResponseError
from .models import Scores, ReportSummary, Improvement


# =============================================================================
# Response schema sent with every turn request
# =============================================================================

TURN_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "interviewComplete": {"type": "BOOLEAN"},
        "nextQuestion": {
            "type": "OBJECT",
            "properties": {
                "questionNumber": {"type": "INTEGER"},
                "question": {"type": "STRING"},
                "sourceOfQuestion": {"type": "STRING", "enum": ["JD", "CandidateProfile", "Mixed"]},
            },
        },
        "currentAnswerAnalysis": {
            "type": "OBJECT",
            "properties": {
                "quickFeedback": {"type": "STRING"},
                "scores": {
                    "type": "OBJECT",
                    "properties": {
                        "relevance": {"type": "INTEGER"},
                        "structure": {"type": "INTEGER"},
                        "metrics": {"type": "INTEGER"},
                        "alignment": {"type": "INTEGER"},
                        "communication": {"type": "INTEGER"},
                    },
                },
            },
        },
        "finalReport": {
            "type": "OBJECT",
            "properties": {
                "summary": {
                    "type": "OBJECT",
                    "properties": {
                        "companyDetected": {"type": "STRING"},
                        "roleDetected": {"type": "STRING"},
                        "overallScore": {"type": "INTEGER"},
                        "topStrengths": {"type": "ARRAY", "items": {"type": "STRING"}},
                        "topImprovements": {
                            "type": "ARRAY",
                            "items": {
                                "type": "OBJECT",
                                "properties": {
                                    "point": {"type": "STRING"},
                                    "suggestion": {"type": "STRING"},
                                },
                            },
                        },
                    },
                },
                "downloadableTranscriptMarkdown": {"type": "STRING"},
                "downloadableReportText": {"type": "STRING"},
            },
        },
    },
    "required": ["interviewComplete"],
}


# =============================================================================
# Pydantic models for validation
# =============================================================================

class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class ScoresModel(_Strict):
    relevance: int = Field(ge=1, le=5)
    structure: int = Field(ge=1, le=5)
    metrics: int = Field(ge=1, le=5)
    alignment: int = Field(ge=1, le=5)
    communication: int = Field(ge=1, le=5)


class NextQuestionModel(_Strict):
    questionNumber: int = Field(ge=1)
    question: str = Field(min_length=1)
    sourceOfQuestion: Literal["JD", "CandidateProfile", "Mixed"]


class AnswerAnalysisModel(_Strict):
    quickFeedback: str
    scores: ScoresModel


class ImprovementModel(_Strict):
    point: str
    suggestion: str


class SummaryModel(_Strict):
    companyDetected: str = ""
    roleDetected: str = ""
    overallScore: int = Field(ge=0, le=100)
    topStrengths: List[str] = Field(default_factory=list)
    topImprovements: List[ImprovementModel] = Field(default_factory=list)


class FinalReportModel(_Strict):
    summary: SummaryModel
    downloadableTranscriptMarkdown: str = ""
    downloadableReportText: str = ""


class TurnResponseModel(_Strict):
    interviewComplete: bool
    nextQuestion: Optional[NextQuestionModel] = None
    currentAnswerAnalysis: Optional[AnswerAnalysisModel] = None
    finalReport: Optional[FinalReportModel] = None


# =============================================================================
# Tagged results handed to the state machine
# =============================================================================

@dataclass(frozen=True)
class AnswerAnalysis:
    quick_feedback: str
    scores: Scores


@dataclass(frozen=True)
class QuestionStep:
    """The model asked another question."""
    question_number: int
    question: str
    source_of_question: str
    previous_answer_analysis: Optional[AnswerAnalysis] = None


@dataclass(frozen=True)
class ReportStep:
    """The model ended the interview with a final report."""
    summary: ReportSummary
    downloadable_transcript_markdown: str = ""
    downloadable_report_text: str = ""
    previous_answer_analysis: Optional[AnswerAnalysis] = None


TurnResult = Union[QuestionStep, ReportStep]


def _analysis(model: Optional[AnswerAnalysisModel]) -> Optional[AnswerAnalysis]:
    if model is None:
        return None
    return AnswerAnalysis(
        quick_feedback=model.quickFeedback,
        scores=Scores(**model.scores.model_dump()),
    )


def parse_turn_response(data: Dict[str, Any], expect_analysis: bool) -> TurnResult:
    """
    Validate a raw turn reply and convert it into a tagged result.

    Args:
        data: Parsed JSON from the model
        expect_analysis: True when the request carried a candidate answer

    Raises:
        MalformedResponseError: on any schema violation
    """
    try:
        response = TurnResponseModel.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Turn response failed validation: {e}") from e

    if response.interviewComplete:
        if response.finalReport is None:
            raise MalformedResponseError("interviewComplete=true but finalReport is missing")
        if expect_analysis and response.currentAnswerAnalysis is None:
            raise MalformedResponseError("Answer was sent but currentAnswerAnalysis is missing")
        report = response.finalReport
        summary = ReportSummary(
            company_detected=report.summary.companyDetected,
            role_detected=report.summary.roleDetected,
            overall_score=report.summary.overallScore,
            top_strengths=tuple(report.summary.topStrengths),
            top_improvements=tuple(Improvement(i.point, i.suggestion) for i in report.summary.topImprovements),
        )
        return ReportStep(
            summary=summary,
            downloadable_transcript_markdown=report.downloadableTranscriptMarkdown,
            downloadable_report_text=report.downloadableReportText,
            previous_answer_analysis=_analysis(response.currentAnswerAnalysis) if expect_analysis else None,
        )

    if response.nextQuestion is None:
        raise MalformedResponseError("interviewComplete=false but nextQuestion is missing")
    if expect_analysis and response.currentAnswerAnalysis is None:
        raise MalformedResponseError("Answer was sent but currentAnswerAnalysis is missing")

    return QuestionStep(
        question_number=response.nextQuestion.questionNumber,
        question=response.nextQuestion.question.strip(),
        source_of_question=response.nextQuestion.sourceOfQuestion,
        previous_answer_analysis=_analysis(response.currentAnswerAnalysis) if expect_analysis else None,
    )
