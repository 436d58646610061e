"""
Transcription module - Speech-to-text abstraction layer.

Factory function for creating STT instances based on provider configuration.
"""

from voicescribe.core.config import ProviderConfig

from .base import BaseSTT

__all__ = ["BaseSTT", "create_stt"]


def create_stt(config: ProviderConfig, provider: str = "openai") -> BaseSTT:
    """
    Factory function to create STT instance based on provider.

    Args:
        config: Immutable provider configuration built at startup.
        provider: STT provider name ("openai" / "whisper-api").

    Returns:
        BaseSTT implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider in ("openai", "whisper-api"):
        from .openai_whisper import OpenAIWhisperSTT

        return OpenAIWhisperSTT(config)
    raise ValueError(f"Unknown STT provider: {provider}")
