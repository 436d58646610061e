"""
Transcription gateway: bridges one uploaded payload to the STT provider.

Each request gets its own temporary file, written synchronously, opened as
the provider request body, and removed on every exit path. Provider calls
that fail with a transient network error are retried a fixed number of
times with a fixed delay. This retry layer is independent of the
recorder's own upload retries, so one user action can reach the provider
up to ``client_max_attempts * gateway_retry_attempts`` times.
"""

import asyncio
import logging
import secrets
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from voicescribe.core.config import ProviderConfig
from voicescribe.core.exceptions import PayloadTooLargeError, TransientProviderError
from voicescribe.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

_DEFAULT_SUFFIX = ".webm"


@contextmanager
def scoped_temp_file(directory: str | Path, data: bytes, suffix: str = _DEFAULT_SUFFIX) -> Iterator[Path]:
    """Write ``data`` to a fresh file and delete it when the block exits.

    The file name is derived from the current time plus a random token so
    concurrent requests never share a path. Deletion failures are logged
    and swallowed; they never replace the error (or result) of the block.

    Yields:
        Path of the written file.
    """
    path = Path(directory) / f"audio-{time.time_ns()}-{secrets.token_hex(4)}{suffix}"
    created = False
    try:
        with path.open("xb") as fh:
            created = True
            fh.write(data)
        logger.debug("File saved: %s (%d bytes)", path, len(data))
        yield path
    finally:
        if created:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to clean up temporary file %s", path, exc_info=True)


def _suffix_for(filename: str | None) -> str:
    """Keep the upload's extension so the provider can detect the container."""
    suffix = Path(filename or "").suffix.lower()
    if suffix and suffix[1:].isalnum() and len(suffix) <= 6:
        return suffix
    return _DEFAULT_SUFFIX


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "Retrying provider call (attempt %d failed): %s",
        retry_state.attempt_number,
        exc,
    )


class TranscriptionGateway:
    """Request handler core for ``POST /transcribe``.

    Args:
        config: Read-only provider configuration built at startup.
        stt: Provider implementation.
        sleep: Coroutine used between retries (injected by tests).
    """

    def __init__(
        self,
        config: ProviderConfig,
        stt: BaseSTT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._stt = stt
        self._sleep = sleep

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def stt(self) -> BaseSTT:
        return self._stt

    def ensure_within_limit(self, size: int | None) -> None:
        """Reject payloads above the provider ceiling before any file I/O.

        Raises:
            PayloadTooLargeError: If ``size`` exceeds ``max_upload_bytes``.
        """
        if size is not None and size > self._config.max_upload_bytes:
            logger.warning(
                "Rejecting upload of %d bytes (limit %d)", size, self._config.max_upload_bytes
            )
            raise PayloadTooLargeError(size, self._config.max_upload_bytes)

    async def transcribe(self, data: bytes, filename: str | None = None) -> str:
        """Persist ``data`` to a scoped temp file and transcribe it.

        Args:
            data: Raw uploaded audio bytes.
            filename: Client-supplied filename, used only for its extension.

        Returns:
            The provider's transcription text.

        Raises:
            PayloadTooLargeError: Payload over the ceiling (no file written).
            TransientProviderError: Provider still failing after all retries.
            ProviderFailureError: Non-retryable provider error.
        """
        self.ensure_within_limit(len(data))

        with scoped_temp_file(self._config.temp_dir, data, _suffix_for(filename)) as path:
            with path.open("rb") as stream:
                logger.info("Starting transcription with model %s", self._config.model)
                retrying = AsyncRetrying(
                    stop=stop_after_attempt(self._config.retry_attempts),
                    wait=wait_fixed(self._config.retry_delay),
                    retry=retry_if_exception_type(TransientProviderError),
                    before_sleep=_log_retry,
                    sleep=self._sleep,
                    reraise=True,
                )
                async for attempt in retrying:
                    with attempt:
                        stream.seek(0)
                        text = await self._stt.transcribe(stream)

        logger.info("Transcription successful (%d chars)", len(text))
        return text
