"""
Per-user history of interview reports, CV analyses and generated CVs.
"""
import base64
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ...config import (
    INTERVIEWS_COLLECTION, CV_ANALYSES_COLLECTION, GENERATED_CVS_COLLECTION, MAX_DOCUMENT_BYTES
)
from .store import DocumentStore, now_timestamp

if TYPE_CHECKING:
    from ...interview.models import InterviewReport
    from ...cv.schemas import CVAnalysisResult

logger = logging.getLogger("history")

KIND_INTERVIEW = "interview"
KIND_CV_ANALYSIS = "cv_analysis"

_KIND_COLLECTIONS = {
    KIND_INTERVIEW: INTERVIEWS_COLLECTION,
    KIND_CV_ANALYSIS: CV_ANALYSES_COLLECTION,
}


@dataclass
class HistoryItem:
    """One row of a user's history list."""
    id: str
    kind: str
    date: datetime
    title: str
    subtitle: str
    score: Optional[int]
    data: Dict[str, Any]


class HistoryRepository:
    """Reads and writes history documents for a user."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def save_interview_report(self, user_email: str, report: 'InterviewReport') -> str:
        summary = report.summary
        doc_id = self.store.add(INTERVIEWS_COLLECTION, {
            "userEmail": user_email.lower(),
            "report": report.to_dict(),
            "company": summary.company_detected or "Unknown Company",
            "role": summary.role_detected or "Unknown Role",
            "score": summary.overall_score,
            "timestamp": now_timestamp(),
        })
        logger.info("Saved interview report %s for %s", doc_id, user_email)
        return doc_id

    def save_cv_analysis(self, user_email: str, analysis: 'CVAnalysisResult', job_description: str) -> str:
        doc_id = self.store.add(CV_ANALYSES_COLLECTION, {
            "userEmail": user_email.lower(),
            "analysis": analysis.model_dump(),
            "matchScore": analysis.match_score,
            "jobSnippet": job_description[:100] + "...",
            "timestamp": now_timestamp(),
        })
        logger.info("Saved CV analysis %s for %s", doc_id, user_email)
        return doc_id

    def save_generated_cv(self, user_email: str, pdf_bytes: bytes) -> Optional[str]:
        """Store a generated PDF. Payloads over the document size limit are skipped."""
        encoded = base64.b64encode(pdf_bytes).decode("ascii")
        if len(encoded) > MAX_DOCUMENT_BYTES:
            logger.warning("Cloud save skipped: PDF (%d bytes encoded) exceeds the %d byte document limit",
                           len(encoded), MAX_DOCUMENT_BYTES)
            return None
        return self.store.add(GENERATED_CVS_COLLECTION, {
            "userEmail": user_email.lower(),
            "fileData": encoded,
            "createdAt": now_timestamp(),
        })

    def get_user_history(self, user_email: str) -> List[HistoryItem]:
        """Interviews and CV analyses for a user, newest first."""
        email = user_email.lower()
        history: List[HistoryItem] = []

        for doc in self.store.find(INTERVIEWS_COLLECTION, "userEmail", email):
            if not doc.get("report"):
                continue
            history.append(HistoryItem(
                id=doc["id"],
                kind=KIND_INTERVIEW,
                date=_to_datetime(doc.get("timestamp")),
                title=f"Interview: {doc.get('role', 'Unknown Role')}",
                subtitle=f"at {doc.get('company', 'Unknown Company')}",
                score=doc.get("score"),
                data=doc["report"],
            ))

        for doc in self.store.find(CV_ANALYSES_COLLECTION, "userEmail", email):
            if not doc.get("analysis"):
                continue
            history.append(HistoryItem(
                id=doc["id"],
                kind=KIND_CV_ANALYSIS,
                date=_to_datetime(doc.get("timestamp")),
                title="CV Analysis",
                subtitle=f"Match Score: {doc.get('matchScore')}/100",
                score=doc.get("matchScore"),
                data=doc["analysis"],
            ))

        history.sort(key=lambda item: item.date, reverse=True)
        return history

    def get_item(self, item_id: str, kind: str) -> Optional[Dict[str, Any]]:
        return self.store.get(_collection_for(kind), item_id)

    def delete_history_item(self, item_id: str, kind: str) -> bool:
        deleted = self.store.delete(_collection_for(kind), item_id)
        if not deleted:
            logger.warning("History item %s/%s not found", kind, item_id)
        return deleted

    def delete_all_user_history(self, user_email: str) -> int:
        email = user_email.lower()
        count = 0
        for collection in (INTERVIEWS_COLLECTION, CV_ANALYSES_COLLECTION):
            for doc in self.store.find(collection, "userEmail", email):
                if self.store.delete(collection, doc["id"]):
                    count += 1
        logger.info("Deleted %d history items for %s", count, email)
        return count


def _collection_for(kind: str) -> str:
    try:
        return _KIND_COLLECTIONS[kind]
    except KeyError:
        raise ValueError(f"Unknown history kind '{kind}' (expected interview or cv_analysis)")


def _to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    return datetime.now()
