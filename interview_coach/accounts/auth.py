"""
Email sign-in against the approved-user list, with a persisted local session.
"""
import os
import json
import logging
from typing import Callable, List, Optional

from ..errors import AccessDeniedError
from .users import UserDirectory, UserProfile, clean_email

logger = logging.getLogger("auth")

MSG_NOT_APPROVED = "Access Denied: This email is not on the approved access list."

AuthListener = Callable[[Optional[UserProfile]], None]


class AuthSession:
    """Tracks the signed-in user and notifies listeners when it changes."""

    def __init__(self, directory: UserDirectory, session_file: str):
        self.directory = directory
        self.session_file = session_file
        self._current: Optional[UserProfile] = None
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[UserProfile]:
        return self._current

    def sign_in(self, email: str) -> UserProfile:
        """
        Sign in with an approved email and remember it.

        Raises:
            AccessDeniedError: the email is not on the approved list
        """
        user = self.directory.get_user(email)
        if user is None:
            logger.warning("Sign-in refused for %s", clean_email(email))
            raise AccessDeniedError(MSG_NOT_APPROVED)

        self._write_session(user.email)
        self._set_current(user)
        logger.info("Signed in as %s", user.email)
        return user

    def sign_out(self) -> None:
        if os.path.exists(self.session_file):
            os.remove(self.session_file)
        self._set_current(None)
        logger.info("Signed out")

    def restore(self) -> Optional[UserProfile]:
        """Re-establish the remembered user, dropping the session if they lost access."""
        email = self._read_session()
        if not email:
            self._set_current(None)
            return None

        user = self.directory.get_user(email)
        if user is None:
            logger.warning("Stored session for %s is no longer approved", email)
            os.remove(self.session_file)
        self._set_current(user)
        return user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def require_user(self) -> UserProfile:
        user = self._current or self.restore()
        if user is None:
            raise AccessDeniedError("Not signed in. Run 'signin EMAIL' first.")
        return user

    def _set_current(self, user: Optional[UserProfile]) -> None:
        self._current = user
        for listener in list(self._listeners):
            listener(user)

    def _read_session(self) -> Optional[str]:
        if not os.path.exists(self.session_file):
            return None
        try:
            with open(self.session_file, "r", encoding="utf-8") as f:
                return clean_email(json.load(f).get("email", "")) or None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.session_file, e)
            return None

    def _write_session(self, email: str) -> None:
        directory = os.path.dirname(self.session_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.session_file, "w", encoding="utf-8") as f:
            json.dump({"email": email}, f)
