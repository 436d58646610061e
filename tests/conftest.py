"""Shared pytest fixtures for VoiceScribe test suite.

Provides provider configuration pointed at a per-test temp directory,
a mock STT provider, and small audio payloads.
"""

import io
import wave
from unittest.mock import AsyncMock

import pytest

from voicescribe.core.config import ProviderConfig, Settings
from voicescribe.services.transcription.base import BaseSTT

# ---------------------------------------------------------------------------
# Configuration Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def upload_dir(tmp_path):
    """Directory the gateway writes its temporary audio files into."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(upload_dir):
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test-key",
        temp_dir=str(upload_dir),
        gateway_retry_delay=0.0,
    )


@pytest.fixture
def provider_config(settings):
    """ProviderConfig derived from the isolated settings."""
    return ProviderConfig.from_settings(settings)


# ---------------------------------------------------------------------------
# STT Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_stt():
    """Create a mock STT provider for unit testing.

    Returns:
        AsyncMock: A mock implementing the BaseSTT interface with a
        default transcribe response.
    """
    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe.return_value = "This is a test transcription."
    return stt


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_wav_bytes():
    """Generate 0.1 seconds of silent 16kHz mono WAV audio.

    Returns:
        bytes: A complete WAV container.
    """
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(b"\x00\x00" * 1600)
    return buffer.getvalue()
