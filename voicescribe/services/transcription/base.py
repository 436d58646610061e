"""
Abstract base class for Speech-to-Text providers.

All STT implementations must implement this interface, enabling the
gateway to stay provider-agnostic. Implementations translate their SDK
exceptions into ``TransientProviderError`` / ``ProviderFailureError``.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from voicescribe.core.models import ProviderStatus


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(self, audio: BinaryIO) -> str:
        """Transcribe an open audio stream to text.

        Args:
            audio: Binary stream positioned at the start of the audio payload.
                Its ``name`` attribute carries the container extension.

        Returns:
            The transcription as plain text.

        Raises:
            TransientProviderError: Connection reset or timeout.
            ProviderFailureError: Any other provider error.
        """

    @abstractmethod
    async def check_connection(self) -> ProviderStatus:
        """Probe the provider: verify credentials and list available models."""

    async def aclose(self) -> None:
        """Release pooled connections. No-op by default."""
