"""Utility modules for the interview coach."""

from .logging import setup_logging
from .documents import DocumentData, load_document, read_text_file

__all__ = ["setup_logging", "DocumentData", "load_document", "read_text_file"]
