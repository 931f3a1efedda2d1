"""Approved-user access control and sign-in sessions."""

from .users import UserDirectory, UserProfile, clean_email
from .auth import AuthSession, MSG_NOT_APPROVED

__all__ = ["UserDirectory", "UserProfile", "clean_email", "AuthSession", "MSG_NOT_APPROVED"]
