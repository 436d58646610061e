"""Integration test fixtures for VoiceScribe.

Builds the real FastAPI application around a mock STT provider and exposes
it through an async HTTP client.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from voicescribe.api.app import create_app


@pytest.fixture
def app(settings, mock_stt):
    """Create a fresh FastAPI application wired to the mock provider."""
    return create_app(settings=settings, stt=mock_stt)


@pytest.fixture
async def async_client(app):
    """AsyncClient talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
