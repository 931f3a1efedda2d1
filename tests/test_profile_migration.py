import pytest

from interview_coach.config import PROFILE_SCHEMA_VERSION, PROFILES_COLLECTION
from interview_coach.candidate import ProfileService, profile_to_text
from interview_coach.candidate.migration import migrate_profile, normalize_description, _schema_version
from interview_coach.candidate.models import CandidateProfile
from interview_coach.interview.testing import MockLLMClient
from interview_coach.utils.documents import DocumentData


def test_legacy_profile_is_migrated(profile):
    assert profile.schema_version == PROFILE_SCHEMA_VERSION
    assert profile.personal_info.name == "Ada Lovelace"

    role = profile.experience[0]
    assert role.id
    assert role.description == ["Built the ledger service", "Cut settlement time by 40%", "Mentored four engineers"]

    school = profile.education[0]
    assert school.end_date == "2012"
    assert school.description == []

    assert [c.name for c in profile.certifications] == ["AWS Solutions Architect"]
    assert profile.certifications[0].id
    assert profile.projects == []


def test_missing_collections_become_empty_lists():
    migrated = migrate_profile({"personalInfo": {"name": "Grace"}})
    assert migrated.experience == []
    assert migrated.skills == []
    assert migrated.certifications == []
    assert migrated.personal_info.email == ""


def test_existing_ids_are_preserved(profile):
    again = migrate_profile(profile.to_dict())
    assert again.experience[0].id == profile.experience[0].id
    assert again.to_dict() == profile.to_dict()


@pytest.mark.parametrize("raw, expected", [
    (None, []),
    ("", []),
    ("Single line", ["Single line"]),
    ("* one\n* two", ["one", "two"]),
    ("• one • two", ["one", "two"]),
    (["- listed", "  ", "plain"], ["listed", "plain"]),
])
def test_normalize_description(raw, expected):
    assert normalize_description(raw) == expected


def test_profile_text_lists_sections(profile):
    text = profile_to_text(profile)
    assert "Name: Ada Lovelace" in text
    assert "Senior Engineer at Acme Payments (Jan 2019 - Present)" in text
    assert "- Cut settlement time by 40%" in text
    assert "Python, Postgres, AWS" in text


def test_service_round_trips_through_store(store, profile):
    service = ProfileService(store)
    assert service.load("ada@example.com") is None

    service.save("Ada@Example.com", profile)
    loaded = service.load("ada@example.com")
    assert loaded.to_dict() == profile.to_dict()
    assert "updatedAt" in store.get(PROFILES_COLLECTION, "ada@example.com")


def test_legacy_document_in_store_is_migrated_on_load(store, legacy_profile_dict):
    store.set(PROFILES_COLLECTION, "ada@example.com", legacy_profile_dict)
    loaded = ProfileService(store).load("ada@example.com")
    assert loaded.schema_version == PROFILE_SCHEMA_VERSION
    assert len(loaded.experience[0].description) == 3


def test_reset_and_load_or_empty(store, profile):
    service = ProfileService(store)
    assert service.load_or_empty("new@example.com").personal_info.email == "new@example.com"

    service.save("ada@example.com", profile)
    reset = service.reset("ada@example.com")
    assert reset.experience == []
    assert service.load("ada@example.com").personal_info.email == "ada@example.com"


def test_import_cv_extracts_and_saves(store, legacy_profile_dict):
    legacy_profile_dict["personalInfo"] = dict(legacy_profile_dict["personalInfo"], email="")
    llm = MockLLMClient(json_responses=[legacy_profile_dict])
    service = ProfileService(store, llm)
    cv = DocumentData(base64="JVBERi0xLjQK", mime_type="application/pdf", name="cv.pdf")

    imported = service.import_cv("Ada@Example.com", cv)

    assert imported.personal_info.email == "ada@example.com"
    assert service.load("ada@example.com").experience[0].company == "Acme Payments"
    request = llm.requests_of("json")[0]
    assert request["parts"][0] == {"inlineData": {"mimeType": "application/pdf", "data": "JVBERi0xLjQK"}}
    assert request["response_schema"]["properties"]["experience"]["items"]["properties"]["description"] == {
        "type": "STRING"
    }


def test_parse_requires_llm_client(store):
    cv = DocumentData(base64="", mime_type="application/pdf", name="cv.pdf")
    with pytest.raises(RuntimeError):
        ProfileService(store).parse_cv_to_profile(cv)


def test_empty_profile_has_current_version():
    assert CandidateProfile.empty("x@example.com").to_dict()["schemaVersion"] == PROFILE_SCHEMA_VERSION


@pytest.mark.parametrize("stored, expected", [("2", 2), ("v2", 1), (None, 1), (1.0, 1)])
def test_stored_schema_version_is_coerced(stored, expected):
    assert _schema_version(stored) == expected
    migrated = migrate_profile({"schemaVersion": stored, "personalInfo": {"name": "Grace"}})
    assert migrated.schema_version == PROFILE_SCHEMA_VERSION
    assert migrated.personal_info.name == "Grace"
