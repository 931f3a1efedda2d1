"""CV alignment: analysis against a job description, rewrites and PDF output."""

from .schemas import (
    CVAnalysisResult, FullCVPreviewResult, SuggestedImprovement, MissingKeyword, LATEX_PLACEHOLDER
)
from .service import CVService, select_changes
from .pdf import CVPdfRenderer

__all__ = [
    "CVAnalysisResult", "FullCVPreviewResult", "SuggestedImprovement", "MissingKeyword",
    "LATEX_PLACEHOLDER", "CVService", "select_changes", "CVPdfRenderer",
]
