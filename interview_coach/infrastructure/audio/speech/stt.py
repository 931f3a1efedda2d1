"""
Speech-to-text through the Gemini multimodal model.
"""
import base64
import logging

from ....config import FAST_MODEL, DEFAULT_AUDIO_MIME
from ....errors import EmptyAudioError
from ...llm.client import GeminiRestClient, inline_part, text_part
from ..processing.capture import AudioBlob

logger = logging.getLogger("speech_stt")

TRANSCRIBE_PROMPT = "Transcribe the user's speech accurately. Provide only the transcribed text."


class TranscriptionClient:
    """Turns one recorded answer into plain text."""

    def __init__(self, llm_client: GeminiRestClient, model: str = FAST_MODEL):
        self.llm_client = llm_client
        self.model = model

    def transcribe(self, blob: AudioBlob) -> str:
        """
        Transcribe a recording.

        Raises:
            EmptyAudioError: the blob has no bytes; nothing is sent
            RemoteCallError: the service call failed after transport retries
        """
        if blob is None or not blob.data:
            raise EmptyAudioError("Recording contained no audio")

        parts = [
            inline_part(base64.b64encode(blob.data).decode("ascii"), blob.mime_type or DEFAULT_AUDIO_MIME),
            text_part(TRANSCRIBE_PROMPT),
        ]
        text = self.llm_client.generate_text(parts, model=self.model).strip()
        logger.info("Transcribed %d bytes of audio -> %d chars", len(blob.data), len(text))
        return text
