from dataclasses import replace

from interview_coach.candidate.models import CandidateProfile, WorkExperience, Project
from interview_coach.cv import CVPdfRenderer
from interview_coach.cv.pdf import safe_text


def test_safe_text_replaces_unencodable_characters():
    assert safe_text("\u201cLed\u201d the team \u2014 shipped\u2026") == '"Led" the team - shipped...'
    assert safe_text("Café\tbar\n") == "Café bar"
    assert safe_text("日本") == "??"
    assert safe_text(None) == ""


def test_render_single_page_profile(profile):
    renderer = CVPdfRenderer()
    data = renderer.render(profile)

    assert data.startswith(b"%PDF-")
    assert renderer.page_count == 1


def test_long_profile_breaks_onto_more_pages(profile):
    roles = [
        WorkExperience(id=f"r{i}", company=f"Company {i}", role="Engineer", start_date="2010", end_date="2012",
                       description=[f"Delivered project {i}.{j} with measurable impact on revenue" for j in range(6)])
        for i in range(12)
    ]
    long_profile = replace(profile, experience=roles,
                           projects=[Project(id="p1", name="Ledger", description=["Open source"], link="github.com/x")])
    renderer = CVPdfRenderer()
    renderer.render(long_profile)
    assert renderer.page_count > 1


def test_empty_profile_still_renders():
    renderer = CVPdfRenderer()
    assert renderer.render(CandidateProfile.empty()).startswith(b"%PDF-")
    assert renderer.page_count == 1


def test_wrap_respects_width(profile):
    renderer = CVPdfRenderer()
    renderer.render(profile)
    renderer._set_font("body")

    text = "Orchestrated a zero-downtime migration of the settlement ledger " * 4 + "x" * 200
    lines = renderer.wrap(text, 60)

    assert len(lines) > 4
    assert all(renderer.pdf.get_string_width(line) <= 60 for line in lines)
    assert "".join(lines).replace(" ", "") == safe_text(text).replace(" ", "")
