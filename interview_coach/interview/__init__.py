"""Interview system components.

This module contains the business logic for running AI-powered voice mock
interviews: the session state machine, turn generation and orchestration.
"""

# Core orchestrator class
from .orchestrator import InterviewOrchestrator

# Data models
from .models import (
    InterviewStatus, Scores, Turn, Improvement, ReportSummary,
    InterviewReport, InterviewInputs, InterviewSession
)

# Wire schemas and parsing
from .schemas import (
    TURN_RESPONSE_SCHEMA, AnswerAnalysis, QuestionStep, ReportStep, parse_turn_response
)

# State machine
from .state_machine import transition, is_degenerate_answer

# Turn generation and report rendering
from .turn_generator import TurnGenerator
from .report import render_transcript_markdown, render_report_text, with_local_renderings, export_report

# Event system
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    EventType, InterviewEvent, InterviewStartedEvent, StatusChangedEvent,
    QuestionAskedEvent, AnswerTranscribedEvent, AnswerRejectedEvent,
    TurnAnalyzedEvent, InterviewCompletedEvent, InterviewFailedEvent
)

__all__ = [
    # Orchestrator
    "InterviewOrchestrator",

    # Data models
    "InterviewStatus", "Scores", "Turn", "Improvement", "ReportSummary",
    "InterviewReport", "InterviewInputs", "InterviewSession",

    # Schemas
    "TURN_RESPONSE_SCHEMA", "AnswerAnalysis", "QuestionStep", "ReportStep", "parse_turn_response",

    # State machine
    "transition", "is_degenerate_answer",

    # Generation / reports
    "TurnGenerator",
    "render_transcript_markdown", "render_report_text", "with_local_renderings", "export_report",

    # Events
    "InterviewEventBus", "EventLogger", "InterviewMetrics",
    "EventType", "InterviewEvent", "InterviewStartedEvent", "StatusChangedEvent",
    "QuestionAskedEvent", "AnswerTranscribedEvent", "AnswerRejectedEvent",
    "TurnAnalyzedEvent", "InterviewCompletedEvent", "InterviewFailedEvent",
]
