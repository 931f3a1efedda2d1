"""
Microphone capture with an explicit start/stop lifecycle.

The recorder owns a single PyAudio input stream. Frames arrive on PortAudio's
callback thread and are buffered until stop() finalizes them into one WAV blob.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ....config import (
    CAPTURE_SAMPLE_RATE, CAPTURE_CHANNELS, FRAME_MS,
    TRANSCRIPTION_SAMPLE_RATE, MSG_MIC_PERMISSION
)
from ....errors import MicrophonePermissionError
from ....utils.audio_env import with_suppressed_audio_warnings
from .processing import decode_pcm16, stereo_to_mono, remove_dc, resample, float_to_pcm16, encode_wav

logger = logging.getLogger("audio_capture")


@dataclass(frozen=True)
class AudioBlob:
    """One finalized recording."""
    data: bytes
    mime_type: str = "audio/wav"

    @property
    def empty(self) -> bool:
        return len(self.data) == 0


BlobCallback = Callable[[AudioBlob], None]


class AudioRecorder:
    """Records microphone audio between start() and stop()."""

    def __init__(self,
                 input_device: Optional[int] = None,
                 sample_rate: int = CAPTURE_SAMPLE_RATE,
                 num_channels: int = CAPTURE_CHANNELS,
                 frame_ms: int = FRAME_MS,
                 target_rate: int = TRANSCRIPTION_SAMPLE_RATE):
        self.input_device = input_device
        self.sample_rate = sample_rate
        self.num_channels = num_channels
        self.frame_size = int(sample_rate * frame_ms / 1000)
        self.target_rate = target_rate

        self._pyaudio = None
        self._pa = None
        self._stream = None
        self._frames: List[bytes] = []
        self._lock = threading.Lock()
        self._recording = False
        self._on_complete: Optional[BlobCallback] = None

    @with_suppressed_audio_warnings
    def open(self) -> None:
        """
        Acquire the microphone.

        Raises:
            MicrophonePermissionError: no input device, or the OS refused access
        """
        if self._stream is not None:
            return

        import pyaudio
        self._pyaudio = pyaudio
        self._pa = pyaudio.PyAudio()

        try:
            if self.input_device is None:
                info = self._pa.get_default_input_device_info()
                self.input_device = int(info["index"])
            else:
                info = self._pa.get_device_info_by_index(self.input_device)
            if int(info.get("maxInputChannels", 0)) < 1:
                raise MicrophonePermissionError(MSG_MIC_PERMISSION)

            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self.num_channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device,
                frames_per_buffer=self.frame_size,
                stream_callback=self._on_frames,
                start=False,
            )
        except MicrophonePermissionError:
            self._terminate()
            raise
        except (IOError, OSError) as e:
            logger.error("Failed to open microphone: %s", e)
            self._terminate()
            raise MicrophonePermissionError(MSG_MIC_PERMISSION) from e

        logger.info("Microphone opened: device=%s rate=%d channels=%d",
                    self.input_device, self.sample_rate, self.num_channels)

    def _on_frames(self, in_data, frame_count, time_info, status):
        with self._lock:
            if self._recording and in_data:
                self._frames.append(in_data)
        return (None, self._pyaudio.paContinue)

    def start(self, on_complete: Optional[BlobCallback] = None) -> None:
        """Begin a new capture. Only one capture may be active at a time."""
        if self._recording:
            raise RuntimeError("A capture is already active")
        if self._stream is None:
            self.open()

        with self._lock:
            self._frames = []
            self._recording = True
        self._on_complete = on_complete
        self._stream.start_stream()
        logger.debug("Recording started")

    def stop(self) -> Optional[AudioBlob]:
        """Finish the capture and deliver the blob through the callback."""
        if not self._recording:
            logger.debug("stop() called with no active capture")
            return None

        self._stream.stop_stream()
        with self._lock:
            self._recording = False
            raw = b"".join(self._frames)
            self._frames = []

        blob = AudioBlob(data=self._finalize(raw))
        logger.info("Recording stopped: %d bytes captured, %d bytes encoded", len(raw), len(blob.data))

        callback, self._on_complete = self._on_complete, None
        if callback:
            callback(blob)
        return blob

    def _finalize(self, raw: bytes) -> bytes:
        if not raw:
            return b""
        samples = decode_pcm16(raw, self.num_channels)
        if samples.size == 0:
            return b""
        mono = remove_dc(stereo_to_mono(samples) if self.num_channels > 1 else samples[:, 0])
        mono = resample(mono, self.sample_rate, self.target_rate)
        return encode_wav(float_to_pcm16(mono), self.target_rate, channels=1)

    def close(self) -> None:
        """Release the microphone."""
        if self._recording:
            self._stream.stop_stream()
            self._recording = False
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        self._terminate()
        logger.debug("Microphone released")

    def _terminate(self) -> None:
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None
