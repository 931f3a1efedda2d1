import os

import pytest

from interview_coach.interview.models import (
    InterviewReport, ReportSummary, Improvement, Turn, Scores, InterviewInputs, InterviewSession
)
from interview_coach.interview.report import (
    render_transcript_markdown, render_report_text, with_local_renderings, export_report
)


def _report(markdown="", text=""):
    return InterviewReport(
        summary=ReportSummary(
            company_detected="Acme Corp",
            role_detected="Platform Engineer",
            overall_score=82,
            top_strengths=("Concrete metrics",),
            top_improvements=(Improvement("Rambling intros", "Answer first, then context."),),
        ),
        transcript=(
            Turn(1, "Why Acme?", "JD", "Payments at scale.", "Tie it to the role.", Scores(4, 3, 2, 5, 4), True),
            Turn(2, "Biggest outage?", "CandidateProfile"),
        ),
        downloadable_transcript_markdown=markdown,
        downloadable_report_text=text,
    )


def test_transcript_markdown_lists_every_turn():
    md = render_transcript_markdown(_report())
    assert md.startswith("# Interview Transcript\n")
    assert "**Company:** Acme Corp" in md
    assert "## Question 1 (JD)" in md
    assert "**A:** Payments at scale." in md
    assert "**Scores:** Relevance 4/5, Structure 3/5, Metrics 2/5, Alignment 5/5, Communication 4/5" in md
    assert "**A:** _No answer recorded_" in md


def test_report_text_sections():
    text = render_report_text(_report())
    assert text.startswith("INTERVIEW PERFORMANCE REPORT\n")
    assert "Overall score: 82/100" in text
    assert "  - Concrete metrics" in text
    assert "    Suggestion: Answer first, then context." in text
    assert "  Q2: Relevance 1/5" in text


def test_local_renderings_fill_only_empty_fields():
    filled = with_local_renderings(_report(markdown="# Mine\n"))
    assert filled.downloadable_transcript_markdown == "# Mine\n"
    assert filled.downloadable_report_text.startswith("INTERVIEW PERFORMANCE REPORT")

    complete = _report(markdown="a", text="b")
    assert with_local_renderings(complete) is complete


def test_export_writes_both_files(tmp_path):
    md_path, txt_path = export_report(_report(), str(tmp_path / "reports"))
    assert os.path.basename(md_path) == "platform-engineer-acme-corp-transcript.md"
    assert os.path.basename(txt_path) == "platform-engineer-acme-corp-report.txt"
    with open(md_path, encoding="utf-8") as f:
        assert f.read().startswith("# Interview Transcript")


def test_report_dict_round_trip():
    report = _report(markdown="m", text="t")
    again = InterviewReport.from_dict(report.to_dict())
    assert again == report


def test_inputs_require_job_description_and_cv_material(inputs):
    with pytest.raises(ValueError):
        InterviewInputs(job_description="  ", cv=inputs.cv)
    with pytest.raises(ValueError):
        InterviewInputs(job_description="Engineer")


def test_progress_is_cosmetic(inputs):
    session = InterviewSession(inputs=inputs, transcript=tuple(Turn(i, "Q") for i in range(1, 10)))
    assert session.progress_percent == 100
    assert InterviewSession(inputs=inputs).progress_percent == 0
