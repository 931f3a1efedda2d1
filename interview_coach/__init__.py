"""
Interview Coach: AI-powered mock interviews and CV alignment.

Runs spoken mock interviews against a job description and the candidate's
CV or saved profile, scores every answer, and produces a final report.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import InterviewOrchestrator
from .interview.models import InterviewInputs, InterviewSession, InterviewReport

__all__ = ["InterviewOrchestrator", "InterviewInputs", "InterviewSession", "InterviewReport"]
