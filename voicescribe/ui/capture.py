"""
Audio capture backends for the recorder.

``MicrophoneSource`` records from the default input device with
sounddevice, accumulating chunks from the stream callback, and packs them
into a WAV container with soundfile when capture stops.
"""

import io
import logging
from abc import ABC, abstractmethod
from threading import Lock

import numpy as np
import soundfile as sf

from voicescribe.core.models import Recording

logger = logging.getLogger(__name__)


class MicrophoneAccessError(Exception):
    """Raised when the input device cannot be opened (missing, busy, or denied)."""


class AudioSource(ABC):
    """A start/stop capture device producing one finalized ``Recording``."""

    @abstractmethod
    def start(self) -> None:
        """Acquire the input device and begin accumulating audio.

        Raises:
            MicrophoneAccessError: If the device cannot be opened.
        """

    @abstractmethod
    def stop(self) -> Recording:
        """Release the input device and return everything captured so far."""


class MicrophoneSource(AudioSource):
    """Default-microphone capture via a sounddevice ``InputStream``.

    Args:
        sample_rate: Capture rate in Hz.
        channels: Number of input channels.
        device: Optional sounddevice device index or name.
    """

    mime_type = "audio/wav"

    def __init__(
        self,
        sample_rate: int = 16_000,
        channels: int = 1,
        device: int | str | None = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self._chunks: list[np.ndarray] = []
        self._lock = Lock()
        self._stream = None

    def _on_audio(self, indata: np.ndarray, _frames: int, _time, status) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        with self._lock:
            self._chunks.append(indata.copy())

    def start(self) -> None:
        # Imported lazily: sounddevice needs PortAudio at import time
        try:
            import sounddevice as sd
        except OSError as exc:
            raise MicrophoneAccessError(f"Audio backend unavailable: {exc}") from exc

        with self._lock:
            self._chunks = []
        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                device=self.device,
                callback=self._on_audio,
            )
            stream.start()
        except sd.PortAudioError as exc:
            raise MicrophoneAccessError(str(exc)) from exc
        self._stream = stream
        logger.info("Microphone capture started (%d Hz, %d ch)", self.sample_rate, self.channels)

    def stop(self) -> Recording:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

        with self._lock:
            chunks, self._chunks = self._chunks, []

        return Recording(data=encode_wav(chunks, self.sample_rate), mime_type=self.mime_type)


def encode_wav(chunks: list[np.ndarray], sample_rate: int) -> bytes:
    """Pack float32 chunks into 16-bit PCM WAV bytes.

    An empty chunk list yields empty bytes, not a header-only container.
    """
    if not chunks:
        return b""
    audio = np.concatenate(chunks, axis=0)
    buffer = io.BytesIO()
    sf.write(buffer, audio, sample_rate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()
