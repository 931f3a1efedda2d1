from unittest.mock import patch, MagicMock

import pytest

from interview_coach.config import INTERVIEWS_COLLECTION, GENERATED_CVS_COLLECTION, MAX_DOCUMENT_BYTES
from interview_coach.cv.schemas import CVAnalysisResult
from interview_coach.infrastructure.data import (
    JsonDocumentStore, MongoDocumentStore, HistoryRepository, KIND_INTERVIEW, KIND_CV_ANALYSIS
)
from interview_coach.interview.models import InterviewReport, ReportSummary, Turn

HISTORY_CLOCK = "interview_coach.infrastructure.data.history.now_timestamp"


def _report(score=70):
    return InterviewReport(
        summary=ReportSummary("Acme Corp", "Platform Engineer", score),
        transcript=(Turn(1, "Why Acme?", "JD", "Because of the platform team."),),
    )


def _analysis(score=64):
    return CVAnalysisResult(
        match_score=score,
        match_explanation=["Strong Python background"],
        suggested_improvements=[],
        critical_additions=["Kubernetes"],
        missing_keywords=[{"keyword": "Terraform", "importance": "High"}],
    )


def test_json_store_crud(store):
    store.set("things", "a@b.com", {"name": "first"})
    assert store.get("things", "a@b.com") == {"name": "first", "id": "a@b.com"}

    new_id = store.add("things", {"name": "second", "id": "ignored"})
    assert store.get("things", new_id)["name"] == "second"
    assert sorted(d["id"] for d in store.list("things")) == sorted(["a@b.com", new_id])
    assert [d["id"] for d in store.find("things", "name", "second")] == [new_id]

    assert store.delete("things", "a@b.com") is True
    assert store.delete("things", "a@b.com") is False
    assert store.get("things", "missing") is None


def test_json_store_persists_across_instances(tmp_path):
    JsonDocumentStore(str(tmp_path)).set("c", "k", {"v": 1})
    assert JsonDocumentStore(str(tmp_path)).get("c", "k")["v"] == 1


def test_mongo_store_maps_ids():
    client = MagicMock()
    collection = client.__getitem__.return_value.__getitem__.return_value
    collection.find_one.return_value = {"_id": "doc-1", "name": "x"}
    collection.find.return_value = [{"_id": "doc-2", "userEmail": "a@b.com"}]

    store = MongoDocumentStore("mongodb://unused", "coach", client=client)

    assert store.get("things", "doc-1") == {"id": "doc-1", "name": "x"}
    assert store.find("things", "userEmail", "a@b.com") == [{"id": "doc-2", "userEmail": "a@b.com"}]
    store.set("things", "doc-3", {"id": "doc-3", "name": "y"})
    collection.replace_one.assert_called_once_with({"_id": "doc-3"}, {"name": "y"}, upsert=True)


def test_history_is_newest_first_and_per_user(store):
    history = HistoryRepository(store)
    with patch(HISTORY_CLOCK, return_value=1000.0):
        interview_id = history.save_interview_report("Ada@Example.com", _report())
    with patch(HISTORY_CLOCK, return_value=2000.0):
        analysis_id = history.save_cv_analysis("ada@example.com", _analysis(), "J" * 150)
    with patch(HISTORY_CLOCK, return_value=3000.0):
        history.save_interview_report("someone@else.com", _report())

    items = history.get_user_history("ADA@example.com")
    assert [(i.id, i.kind) for i in items] == [(analysis_id, KIND_CV_ANALYSIS), (interview_id, KIND_INTERVIEW)]

    analysis_item, interview_item = items
    assert analysis_item.subtitle == "Match Score: 64/100"
    assert analysis_item.data["missing_keywords"][0]["keyword"] == "Terraform"
    assert interview_item.title == "Interview: Platform Engineer"
    assert interview_item.subtitle == "at Acme Corp"
    assert InterviewReport.from_dict(interview_item.data).transcript[0].candidate_answer == "Because of the platform team."

    stored = history.get_item(analysis_id, KIND_CV_ANALYSIS)
    assert stored["jobSnippet"] == "J" * 100 + "..."


def test_delete_single_and_all(store):
    history = HistoryRepository(store)
    first = history.save_interview_report("ada@example.com", _report())
    history.save_interview_report("ada@example.com", _report())
    history.save_cv_analysis("ada@example.com", _analysis(), "jd")
    history.save_interview_report("other@example.com", _report())

    assert history.delete_history_item(first, KIND_INTERVIEW) is True
    assert history.delete_history_item(first, KIND_INTERVIEW) is False
    assert history.delete_all_user_history("ada@example.com") == 2
    assert history.get_user_history("ada@example.com") == []
    assert len(history.get_user_history("other@example.com")) == 1


def test_unknown_kind_is_rejected(store):
    with pytest.raises(ValueError):
        HistoryRepository(store).delete_history_item("x", "podcast")


def test_documents_without_payload_are_skipped(store):
    store.add(INTERVIEWS_COLLECTION, {"userEmail": "ada@example.com", "timestamp": 1.0})
    assert HistoryRepository(store).get_user_history("ada@example.com") == []


def test_generated_cv_respects_document_limit(store):
    history = HistoryRepository(store)
    small_id = history.save_generated_cv("ada@example.com", b"%PDF-1.4 small")
    assert store.get(GENERATED_CVS_COLLECTION, small_id)["fileData"]

    too_big = b"x" * (MAX_DOCUMENT_BYTES * 3 // 4 + 10)
    assert history.save_generated_cv("ada@example.com", too_big) is None
    assert len(store.list(GENERATED_CVS_COLLECTION)) == 1
