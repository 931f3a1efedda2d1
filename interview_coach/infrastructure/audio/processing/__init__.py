"""Audio processing, capture and playback modules."""

# Processing functions have no hardware dependencies
from .processing import (
    decode_pcm16,
    decode_base64_pcm,
    stereo_to_mono,
    remove_dc,
    resample,
    float_to_pcm16,
    encode_wav,
)

# pyaudio is only imported when a device is actually opened
from .capture import AudioRecorder, AudioBlob
from .playback import AudioPlayer

__all__ = [
    "AudioRecorder",
    "AudioBlob",
    "AudioPlayer",
    "decode_pcm16",
    "decode_base64_pcm",
    "stereo_to_mono",
    "remove_dc",
    "resample",
    "float_to_pcm16",
    "encode_wav",
]
