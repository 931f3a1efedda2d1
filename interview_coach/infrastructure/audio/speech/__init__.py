"""Speech recognition and synthesis."""

from .stt import TranscriptionClient
from .tts import SpeechSynthesizer

__all__ = ["TranscriptionClient", "SpeechSynthesizer"]
