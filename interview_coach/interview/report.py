"""
Local renderings of an interview report.

Used when the model leaves the downloadable renderings empty, and for
exporting stored reports. Nothing here calls a remote service.
"""
import os
import re
from dataclasses import replace
from typing import Tuple

from .models import InterviewReport, Turn

SCORE_LABELS = ("relevance", "structure", "metrics", "alignment", "communication")


def _score_line(turn: Turn) -> str:
    scores = turn.scores.to_dict()
    return ", ".join(f"{label.title()} {scores[label]}/5" for label in SCORE_LABELS)


def render_transcript_markdown(report: InterviewReport) -> str:
    summary = report.summary
    lines = [
        "# Interview Transcript",
        "",
        f"**Role:** {summary.role_detected or 'Unknown Role'}  ",
        f"**Company:** {summary.company_detected or 'Unknown Company'}  ",
        f"**Overall score:** {summary.overall_score}/100",
        "",
    ]
    for turn in report.transcript:
        lines += [
            f"## Question {turn.question_number} ({turn.source_of_question})",
            "",
            f"**Q:** {turn.question}",
            "",
            f"**A:** {turn.candidate_answer or '_No answer recorded_'}",
            "",
            f"**Feedback:** {turn.quick_feedback}",
            "",
            f"**Scores:** {_score_line(turn)}",
            "",
        ]
    return "\n".join(lines).rstrip() + "\n"


def render_report_text(report: InterviewReport) -> str:
    summary = report.summary
    lines = [
        "INTERVIEW PERFORMANCE REPORT",
        "=" * 28,
        f"Role: {summary.role_detected or 'Unknown Role'}",
        f"Company: {summary.company_detected or 'Unknown Company'}",
        f"Overall score: {summary.overall_score}/100",
        "",
        "TOP STRENGTHS",
    ]
    lines += [f"  - {s}" for s in summary.top_strengths] or ["  (none listed)"]
    lines += ["", "AREAS TO IMPROVE"]
    for item in summary.top_improvements:
        lines.append(f"  - {item.point}")
        lines.append(f"    Suggestion: {item.suggestion}")
    if not summary.top_improvements:
        lines.append("  (none listed)")
    lines += ["", "PER-QUESTION SCORES"]
    for turn in report.transcript:
        lines.append(f"  Q{turn.question_number}: {_score_line(turn)}")
        lines.append(f"      {turn.quick_feedback}")
    return "\n".join(lines) + "\n"


def with_local_renderings(report: InterviewReport) -> InterviewReport:
    """Fill in whichever downloadable rendering the model left empty."""
    markdown = report.downloadable_transcript_markdown
    text = report.downloadable_report_text
    if markdown.strip() and text.strip():
        return report
    return replace(
        report,
        downloadable_transcript_markdown=markdown if markdown.strip() else render_transcript_markdown(report),
        downloadable_report_text=text if text.strip() else render_report_text(report),
    )


def _slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "interview"


def export_report(report: InterviewReport, directory: str, stem: str = "") -> Tuple[str, str]:
    """Write the transcript (.md) and report (.txt); returns both paths."""
    os.makedirs(directory, exist_ok=True)
    report = with_local_renderings(report)
    stem = stem or _slug(f"{report.summary.role_detected} {report.summary.company_detected}")
    md_path = os.path.join(directory, f"{stem}-transcript.md")
    txt_path = os.path.join(directory, f"{stem}-report.txt")
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(report.downloadable_transcript_markdown)
    with open(txt_path, "w", encoding="utf-8") as f:
        f.write(report.downloadable_report_text)
    return md_path, txt_path
