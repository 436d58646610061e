"""
Synchronous HTTP client for the VoiceScribe gateway.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
``transcribe()`` owns the recorder's upload retry loop: a bounded number of
attempts, a wall-clock deadline per attempt, and linear backoff between
attempts. Which errors are worth retrying is decided by ``is_retryable()`` alone.
"""

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import httpx
import streamlit as st
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from voicescribe.core.config import get_settings
from voicescribe.core.models import Recording

logger = logging.getLogger(__name__)

# Categories produced by the transport layer that indicate a transient fault
_TRANSIENT_CATEGORIES = frozenset({"timeout", "reset"})


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "reset", "http", "network", "unknown".
    ``status_code`` and ``kind`` are set for HTTP errors returned by the gateway.
    """

    def __init__(
        self,
        message: str,
        category: str = "unknown",
        status_code: int | None = None,
        kind: str | None = None,
    ) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        self.kind = kind
        super().__init__(message)


def is_retryable(error: BaseException) -> bool:
    """Return True for transient failures: connection reset, timeout, or HTTP 503."""
    if not isinstance(error, APIError):
        return False
    return error.category in _TRANSIENT_CATEGORIES or error.status_code == 503


class APIClient:
    """Thin synchronous wrapper around httpx for calling the gateway.

    All methods return parsed JSON or raise ``APIError`` with
    user-friendly messages for display in the UI.

    Args:
        base_url: Base URL of the VoiceScribe gateway.
        timeout: Wall-clock deadline per transcription upload attempt, in seconds.
        max_attempts: Total upload attempts per transcription.
        retry_base_delay: Delay unit for linear backoff (base * attempt index).
        sleep: Blocking sleep used between attempts (injected by tests).
        transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 120.0,
        max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._sleep = sleep
        self._client = httpx.Client(base_url=self._base_url, timeout=30.0, transport=transport)
        # Abandoned uploads keep running in their worker, so size the pool for every attempt
        self._uploads = ThreadPoolExecutor(
            max_workers=max(max_attempts, 1), thread_name_prefix="voicescribe-upload"
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post").
            path: Endpoint path (e.g. "/transcribe").
            **kwargs: Passed through to httpx (files, params, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            APIError: On connection, timeout, reset, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Gateway server is not running. "
                "Start it with: `uvicorn voicescribe.api.app:app --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. Try with a shorter recording.",
                category="timeout",
            ) from None
        except (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError) as exc:
            raise APIError(f"Connection reset: {exc}", category="reset") from None
        except httpx.HTTPStatusError as exc:
            kind = None
            try:
                body = exc.response.json()
                detail = body.get("details") or body.get("error") or exc.response.text
                kind = body.get("kind")
            except Exception:
                detail = exc.response.text or str(exc)
            raise APIError(
                str(detail or "Transcription failed"),
                category="http",
                status_code=exc.response.status_code,
                kind=kind,
            ) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the gateway is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- diagnostics --

    def test_connection(self) -> str:
        """Run the gateway's provider diagnostics and summarize the outcome."""
        try:
            resp = self._client.get("/test")
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            return f"Connection test failed: {exc}"

        if data.get("status") == "error":
            return f"Connection test failed: {data.get('error')}"
        available = data.get("tests", {}).get("whisperAvailable")
        return f"Connection test passed! Whisper {'is' if available else 'is not'} available."

    # -- transcription --

    def _post_recording(self, recording: Recording) -> str:
        files = {"audio": (recording.filename, recording.data, recording.mime_type)}
        future = self._uploads.submit(
            self._request, "post", "/transcribe", files=files, timeout=self._timeout
        )
        try:
            resp = future.result(timeout=self._timeout)
        except TimeoutError:
            future.cancel()
            raise APIError(
                "Request timed out. Try with a shorter recording.",
                category="timeout",
            ) from None
        try:
            text = resp.json()["text"]
        except (ValueError, KeyError, TypeError):
            text = None
        if not isinstance(text, str):
            raise APIError(
                "Unexpected response from gateway", category="http", status_code=resp.status_code
            )
        return text

    def transcribe(
        self,
        recording: Recording,
        on_attempt: Callable[[int], None] | None = None,
        on_retry: Callable[[int, float], None] | None = None,
    ) -> str:
        """Upload a recording and return its transcription.

        Transient failures are retried up to ``max_attempts`` in total, waiting
        ``retry_base_delay * n`` seconds after the n-th failed attempt.

        Args:
            recording: The finalized recording to upload.
            on_attempt: Called with the 1-based attempt number before each attempt.
            on_retry: Called with (failed attempt number, delay) before each wait.

        Returns:
            The transcription text.

        Raises:
            APIError: The last error, once retries are exhausted or on a
                non-retryable failure.
        """

        def _before(retry_state: RetryCallState) -> None:
            logger.info(
                "Transcription attempt %d/%d", retry_state.attempt_number, self._max_attempts
            )
            if on_attempt:
                on_attempt(retry_state.attempt_number)

        def _before_sleep(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                "Transcription attempt %d failed (%s); retrying in %.1fs",
                retry_state.attempt_number,
                retry_state.outcome.exception() if retry_state.outcome else None,
                delay,
            )
            if on_retry:
                on_retry(retry_state.attempt_number, delay)

        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_incrementing(start=self._retry_base_delay, increment=self._retry_base_delay),
            retry=retry_if_exception(is_retryable),
            before=_before,
            before_sleep=_before_sleep,
            sleep=self._sleep,
            reraise=True,
        )
        text = retrying(self._post_recording, recording)
        logger.info("Transcription completed successfully")
        return text

    def close(self) -> None:
        self._uploads.shutdown(wait=False, cancel_futures=True)
        self._client.close()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000") -> APIClient:
    """Return a cached APIClient, keyed by base_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    Timeout and retry parameters come from settings.
    """
    settings = get_settings()
    return APIClient(
        base_url=base_url,
        timeout=settings.client_timeout,
        max_attempts=settings.client_max_attempts,
        retry_base_delay=settings.client_retry_base_delay,
    )
