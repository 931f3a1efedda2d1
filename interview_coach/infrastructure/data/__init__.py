"""Data persistence and management."""

from .store import DocumentStore, JsonDocumentStore, MongoDocumentStore, create_document_store
from .history import HistoryRepository, HistoryItem, KIND_INTERVIEW, KIND_CV_ANALYSIS

__all__ = [
    "DocumentStore", "JsonDocumentStore", "MongoDocumentStore", "create_document_store",
    "HistoryRepository", "HistoryItem", "KIND_INTERVIEW", "KIND_CV_ANALYSIS",
]
