"""Infrastructure components: external services, devices and storage.

Audio devices are opened lazily, so importing this package does not require
a working PortAudio installation.
"""

from .llm import GeminiRestClient
from .data import (
    DocumentStore, JsonDocumentStore, MongoDocumentStore, create_document_store,
    HistoryRepository,
)
from .audio import AudioRecorder, AudioPlayer, TranscriptionClient, SpeechSynthesizer

__all__ = [
    "GeminiRestClient",
    "DocumentStore", "JsonDocumentStore", "MongoDocumentStore", "create_document_store",
    "HistoryRepository",
    "AudioRecorder", "AudioPlayer", "TranscriptionClient", "SpeechSynthesizer",
]
