"""OpenAI Whisper API provider.

Uses the OpenAI Python SDK (``openai.AsyncOpenAI``) with a keep-alive
connection pool sized from ``ProviderConfig``. SDK exceptions are translated
at this boundary so the gateway never has to look at error message text.
"""

import logging
from typing import BinaryIO

import httpx
from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    DefaultAsyncHttpxClient,
    OpenAIError,
)

from voicescribe.core.config import ProviderConfig
from voicescribe.core.exceptions import (
    ProviderAuthError,
    ProviderFailureError,
    TransientProviderError,
)
from voicescribe.core.models import ProviderStatus
from voicescribe.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

_RATE_LIMIT_HEADERS = (
    "x-ratelimit-limit-requests",
    "x-ratelimit-remaining-requests",
    "x-ratelimit-reset-requests",
)


class OpenAIWhisperSTT(BaseSTT):
    """Speech-to-text provider backed by the hosted Whisper API.

    Args:
        config: Provider configuration (key, model, language hint, timeouts).
        client: Optional pre-built ``AsyncOpenAI`` client (used by tests).
    """

    def __init__(self, config: ProviderConfig, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        """Return the SDK client, creating it on first use.

        The SDK refuses to build a client without credentials, so the key
        is checked first and a keyless gateway can still start.
        """
        if not self._config.api_key:
            raise ProviderAuthError()
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.api_key,
                timeout=self._config.timeout,
                max_retries=self._config.max_retries,
                http_client=DefaultAsyncHttpxClient(
                    limits=httpx.Limits(
                        max_keepalive_connections=self._config.keepalive_connections,
                        keepalive_expiry=self._config.keepalive_expiry,
                    ),
                ),
            )
        return self._client

    async def transcribe(self, audio: BinaryIO) -> str:
        """Send the audio stream to Whisper and return the plain-text result."""
        client = self._get_client()
        try:
            result = await client.audio.transcriptions.create(
                file=audio,
                model=self._config.model,
                language=self._config.language,
                response_format=self._config.response_format,
                temperature=self._config.temperature,
            )
        except APITimeoutError as exc:
            logger.warning("Whisper API timeout: %s", exc)
            raise TransientProviderError(f"Request timed out: {exc}", timed_out=True) from exc
        except APIConnectionError as exc:
            logger.warning("Whisper API connection error: %s", exc)
            raise TransientProviderError(f"Connection error: {exc}") from exc
        except AuthenticationError as exc:
            logger.error("Whisper API rejected the API key: %s", exc)
            raise ProviderAuthError(f"Invalid API key: {exc}") from exc
        except OpenAIError as exc:
            logger.error("Whisper API error: %s", exc)
            raise ProviderFailureError(str(exc)) from exc

        # response_format="text" yields a str; other formats yield a model with .text
        text = result if isinstance(result, str) else getattr(result, "text", "")
        return text.strip()

    async def check_connection(self) -> ProviderStatus:
        """List the models visible to this key and capture rate-limit headers."""
        client = self._get_client()
        try:
            raw = await client.models.with_raw_response.list()
            page = await raw.parse()
        except APITimeoutError as exc:
            raise TransientProviderError(f"Request timed out: {exc}", timed_out=True) from exc
        except APIConnectionError as exc:
            raise TransientProviderError(f"Connection error: {exc}") from exc
        except AuthenticationError as exc:
            raise ProviderAuthError(f"Invalid API key: {exc}") from exc
        except OpenAIError as exc:
            raise ProviderFailureError(str(exc)) from exc

        rate_limits = {
            name: raw.headers[name] for name in _RATE_LIMIT_HEADERS if name in raw.headers
        }
        return ProviderStatus(models=[model.id for model in page.data], rate_limits=rate_limits)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
