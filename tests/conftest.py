import pytest

from interview_coach.infrastructure.data.store import JsonDocumentStore
from interview_coach.candidate.migration import migrate_profile
from interview_coach.interview.testing import create_mock_inputs


LEGACY_PROFILE = {
    "personalInfo": {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "location": "London",
        "linkedin": "linkedin.com/in/ada",
    },
    "summary": "Backend engineer with ten years of payments experience.",
    "experience": [
        {
            "company": "Acme Payments",
            "role": "Senior Engineer",
            "startDate": "Jan 2019",
            "endDate": "Present",
            "description": "• Built the ledger service\n• Cut settlement time by 40%\n- Mentored four engineers",
        }
    ],
    "education": [
        {"institution": "University of London", "degree": "BSc", "major": "Mathematics", "year": "2012"}
    ],
    "skills": ["Python", "Postgres", "AWS"],
    "certifications": ["AWS Solutions Architect"],
}


@pytest.fixture
def store(tmp_path):
    return JsonDocumentStore(str(tmp_path / "db"))


@pytest.fixture
def legacy_profile_dict():
    return dict(LEGACY_PROFILE)


@pytest.fixture
def profile():
    return migrate_profile(LEGACY_PROFILE)


@pytest.fixture
def inputs():
    return create_mock_inputs()
