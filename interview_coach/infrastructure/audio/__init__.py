"""Audio infrastructure: devices, processing and speech."""

from .processing import AudioRecorder, AudioBlob, AudioPlayer, decode_pcm16, decode_base64_pcm
from .speech import TranscriptionClient, SpeechSynthesizer

__all__ = [
    "AudioRecorder", "AudioBlob", "AudioPlayer",
    "decode_pcm16", "decode_base64_pcm",
    "TranscriptionClient", "SpeechSynthesizer",
]
