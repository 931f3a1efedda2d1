"""
Synchronous playback of synthesized speech.
"""
import logging
from typing import Optional

import numpy as np

from ....config import TTS_SAMPLE_RATE
from ....utils.audio_env import with_suppressed_audio_warnings
from .processing import decode_base64_pcm

logger = logging.getLogger("audio_playback")


class AudioPlayer:
    """Plays base64 mono PCM16 through the default (or given) output device."""

    def __init__(self, sample_rate: int = TTS_SAMPLE_RATE, output_device: Optional[int] = None,
                 volume: float = 1.0):
        self.sample_rate = sample_rate
        self.output_device = output_device
        self.volume = max(0.0, min(1.0, volume))

    @with_suppressed_audio_warnings
    def play(self, audio_b64: str) -> None:
        """Decode and play; returns once playback has finished."""
        samples = decode_base64_pcm(audio_b64)[:, 0] * self.volume
        if samples.size == 0:
            logger.warning("Nothing to play: empty audio payload")
            return

        import pyaudio
        pa = pyaudio.PyAudio()
        stream = None
        try:
            stream = pa.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=self.sample_rate,
                output=True,
                output_device_index=self.output_device,
            )
            stream.write(samples.astype(np.float32).tobytes())
            logger.debug("Played %.1fs of audio", samples.size / self.sample_rate)
        finally:
            if stream is not None:
                stream.stop_stream()
                stream.close()
            pa.terminate()
