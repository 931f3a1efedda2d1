import json
import os

import pytest

from interview_coach.accounts import UserDirectory, AuthSession
from interview_coach.accounts.auth import MSG_NOT_APPROVED
from interview_coach.config import APPROVED_USERS_COLLECTION, CONFIG_COLLECTION, ADMIN_SETTINGS_DOC
from interview_coach.errors import AccessDeniedError


@pytest.fixture
def directory(store):
    store.add(APPROVED_USERS_COLLECTION, {"email": "ada@example.com", "isAdmin": True})
    # hand-entered record keyed by id only
    store.set(APPROVED_USERS_COLLECTION, "grace@example.com", {"createdAt": 1.0})
    return UserDirectory(store)


@pytest.fixture
def auth(directory, tmp_path):
    return AuthSession(directory, str(tmp_path / "state" / "session.json"))


def test_lookup_by_field_and_by_id(directory):
    ada = directory.get_user("  ADA@example.com ")
    assert ada.email == "ada@example.com"
    assert ada.is_admin is True

    grace = directory.get_user("grace@example.com")
    assert grace.email == "grace@example.com"
    assert grace.is_admin is False

    assert directory.get_user("nobody@example.com") is None
    assert directory.get_user("") is None


def test_add_and_remove_approved_emails(directory):
    assert directory.list_approved_emails() == ["ada@example.com", "grace@example.com"]
    assert directory.add_approved_email("Linus@Example.com") == [
        "ada@example.com", "grace@example.com", "linus@example.com"
    ]
    # duplicates are not added twice
    assert directory.add_approved_email("linus@example.com").count("linus@example.com") == 1

    assert directory.remove_approved_email("grace@example.com") == ["ada@example.com", "linus@example.com"]
    assert directory.remove_approved_email("ada@example.com") == ["linus@example.com"]


def test_add_rejects_invalid_email(directory):
    with pytest.raises(ValueError):
        directory.add_approved_email("not-an-email")


def test_admin_pin(directory, store):
    with pytest.raises(AccessDeniedError, match="Security configuration missing"):
        directory.validate_admin_pin("1234")

    store.set(CONFIG_COLLECTION, ADMIN_SETTINGS_DOC, {"pin": '"1234" '})
    directory.validate_admin_pin(" 1234")
    with pytest.raises(AccessDeniedError, match="Incorrect PIN"):
        directory.validate_admin_pin("4321")


def test_sign_in_persists_and_notifies(auth):
    seen = []
    unsubscribe = auth.subscribe(seen.append)

    user = auth.sign_in("Ada@Example.com")

    assert auth.current_user is user
    assert seen == [user]
    with open(auth.session_file) as f:
        assert json.load(f) == {"email": "ada@example.com"}

    unsubscribe()
    auth.sign_out()
    assert auth.current_user is None
    assert seen == [user]
    assert not os.path.exists(auth.session_file)


def test_sign_in_refuses_unapproved_email(auth):
    with pytest.raises(AccessDeniedError, match=MSG_NOT_APPROVED):
        auth.sign_in("mallory@example.com")
    assert auth.current_user is None
    assert not os.path.exists(auth.session_file)


def test_restore_remembered_session(auth, directory):
    auth.sign_in("grace@example.com")
    fresh = AuthSession(directory, auth.session_file)
    assert fresh.restore().email == "grace@example.com"
    assert fresh.require_user().email == "grace@example.com"


def test_restore_drops_revoked_user(auth, directory):
    auth.sign_in("grace@example.com")
    directory.remove_approved_email("grace@example.com")

    fresh = AuthSession(directory, auth.session_file)
    assert fresh.restore() is None
    assert not os.path.exists(auth.session_file)
    with pytest.raises(AccessDeniedError):
        fresh.require_user()
