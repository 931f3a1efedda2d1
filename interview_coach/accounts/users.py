"""
Approved-user directory and admin PIN verification.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import APPROVED_USERS_COLLECTION, CONFIG_COLLECTION, ADMIN_SETTINGS_DOC
from ..errors import AccessDeniedError
from ..infrastructure.data.store import DocumentStore, now_timestamp

logger = logging.getLogger("users")


@dataclass
class UserProfile:
    """An approved user."""
    email: str
    is_admin: bool = False
    created_at: Optional[float] = None

    @classmethod
    def from_dict(cls, data):
        return cls(email=data["email"], is_admin=bool(data.get("isAdmin")), created_at=data.get("createdAt"))


def clean_email(email: str) -> str:
    return (email or "").strip().lower()


class UserDirectory:
    """
    Approved users live in one collection. A user document is recognised
    either by its "email" field or, for hand-entered records, by a document
    id equal to the email.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_approved_emails(self) -> List[str]:
        emails = [doc.get("email") or doc["id"] for doc in self.store.list(APPROVED_USERS_COLLECTION)]
        return sorted(set(emails))

    def get_user(self, email: str) -> Optional[UserProfile]:
        """Look a user up by email field first, then by document id."""
        email = clean_email(email)
        if not email:
            return None
        logger.debug("Looking up user '%s'", email)

        matches = self.store.find(APPROVED_USERS_COLLECTION, "email", email)
        if matches:
            return UserProfile.from_dict(matches[0])

        data = self.store.get(APPROVED_USERS_COLLECTION, email)
        if data is not None:
            return UserProfile(email=email, is_admin=bool(data.get("isAdmin")), created_at=data.get("createdAt"))
        return None

    def add_approved_email(self, email: str) -> List[str]:
        email = clean_email(email)
        if "@" not in email:
            raise ValueError(f"Not a valid email address: '{email}'")
        if self.get_user(email) is not None:
            logger.info("%s is already approved", email)
        else:
            self.store.add(APPROVED_USERS_COLLECTION, {"email": email, "isAdmin": False, "createdAt": now_timestamp()})
            logger.info("Approved %s", email)
        return self.list_approved_emails()

    def remove_approved_email(self, email: str) -> List[str]:
        """Remove every record for an email, by field and by document id."""
        email = clean_email(email)
        removed = 0
        for doc in self.store.find(APPROVED_USERS_COLLECTION, "email", email):
            removed += int(self.store.delete(APPROVED_USERS_COLLECTION, doc["id"]))
        if self.store.get(APPROVED_USERS_COLLECTION, email) is not None:
            removed += int(self.store.delete(APPROVED_USERS_COLLECTION, email))
        logger.info("Removed %d record(s) for %s", removed, email)
        return self.list_approved_emails()

    def validate_admin_pin(self, pin: str) -> None:
        """
        Check a PIN against system_config/admin_settings.

        Raises:
            AccessDeniedError: wrong PIN, or the admin settings are missing
        """
        settings = self.store.get(CONFIG_COLLECTION, ADMIN_SETTINGS_DOC)
        if settings is None or settings.get("pin") is None:
            raise AccessDeniedError(
                f"Security configuration missing. Please create '{CONFIG_COLLECTION}/{ADMIN_SETTINGS_DOC}' in the database."
            )

        stored = str(settings["pin"]).replace('"', "").replace("'", "").strip()
        if stored != (pin or "").strip():
            logger.warning("Admin PIN rejected")
            raise AccessDeniedError("Incorrect PIN.")
        logger.info("Admin PIN accepted")
