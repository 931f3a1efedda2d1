"""
Basic audio processing functions: PCM decoding, format conversions and resampling.
"""
import io
import wave
import base64
from math import gcd

import numpy as np
from scipy.signal import resample_poly


def decode_pcm16(data: bytes, num_channels: int = 1) -> np.ndarray:
    """
    Decode interleaved 16-bit little-endian PCM into float32 samples.

    Returns an array shaped (frames, num_channels) with values in [-1.0, 1.0).
    A trailing partial sample or frame is dropped.
    """
    usable = len(data) - (len(data) % (2 * num_channels))
    samples = np.frombuffer(data[:usable], dtype="<i2").astype(np.float32) / 32768.0
    return samples.reshape(-1, num_channels)


def decode_base64_pcm(audio_b64: str, num_channels: int = 1) -> np.ndarray:
    """Decode a base64 PCM payload as returned by the speech model."""
    return decode_pcm16(base64.b64decode(audio_b64), num_channels)


def stereo_to_mono(x: np.ndarray) -> np.ndarray:
    """Convert multi-channel audio to mono by averaging channels."""
    if x.ndim == 1:
        return x
    return np.mean(x, axis=1)


def remove_dc(x: np.ndarray) -> np.ndarray:
    """Remove DC offset from audio signal."""
    if x.size == 0:
        return x
    return x - np.mean(x)


def resample(x: np.ndarray, sr_from: int, sr_to: int) -> np.ndarray:
    """Polyphase resampling between arbitrary integer rates."""
    if sr_from == sr_to or x.size == 0:
        return x.astype(np.float32)
    g = gcd(sr_from, sr_to)
    return resample_poly(x, up=sr_to // g, down=sr_from // g).astype(np.float32)


def float_to_pcm16(x: np.ndarray) -> np.ndarray:
    return np.clip(x * 32767, -32768, 32767).astype(np.int16)


def encode_wav(pcm16: np.ndarray, sr: int, channels: int = 1) -> bytes:
    """Encode PCM16 samples as an in-memory WAV file."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(pcm16.astype("<i2").tobytes())
    return buf.getvalue()
