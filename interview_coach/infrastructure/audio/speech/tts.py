"""
Text-to-speech through the Gemini speech model.
"""
import logging

from ....config import TTS_MODEL, TTS_VOICE
from ...llm.client import GeminiRestClient

logger = logging.getLogger("speech_tts")

SPEECH_PROMPT = "Say this in a clear, professional voice: {text}"


class SpeechSynthesizer:
    """Synthesizes interviewer questions as base64 mono PCM16 at 24 kHz."""

    def __init__(self, llm_client: GeminiRestClient, voice: str = TTS_VOICE, model: str = TTS_MODEL):
        self.llm_client = llm_client
        self.voice = voice
        self.model = model

    def synthesize(self, text: str) -> str:
        if not text.strip():
            raise ValueError("Cannot synthesize empty text")
        audio_b64 = self.llm_client.generate_audio(
            SPEECH_PROMPT.format(text=text), voice=self.voice, model=self.model
        )
        logger.debug("Synthesized %d chars of text (%d base64 chars)", len(text), len(audio_b64))
        return audio_b64
