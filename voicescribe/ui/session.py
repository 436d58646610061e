"""
Recorder session: the state machine behind the record/transcribe UI.

States: idle -> recording -> stopped -> (transcribing <-> retry_wait) -> done | failed

A new capture may start from idle, stopped, done or failed and discards the
previous recording and transcription. Upload retries are reflected only in
``retry_count`` and the ``retry_wait`` state; the session always ends in
either a transcription or one consolidated error message.
"""

import logging
from collections.abc import Callable

from voicescribe.core.exceptions import InvalidRecorderStateError
from voicescribe.core.models import Recording, RecorderState, TranscriptDownload
from voicescribe.ui.api_client import APIClient, APIError
from voicescribe.ui.capture import AudioSource, MicrophoneAccessError

logger = logging.getLogger(__name__)

MICROPHONE_PERMISSION_MESSAGE = "Please allow microphone access to record audio."

_CAN_START = frozenset(
    {RecorderState.idle, RecorderState.stopped, RecorderState.done, RecorderState.failed}
)
_BUSY = frozenset({RecorderState.recording, RecorderState.transcribing, RecorderState.retry_wait})


class RecorderSession:
    """Capture, hold, and transcribe one recording at a time.

    Args:
        client: Gateway client that performs the upload retry loop.
        source: Capture backend; may be None when recordings are loaded
            from elsewhere (e.g. the browser's audio widget).
    """

    def __init__(self, client: APIClient, source: AudioSource | None = None) -> None:
        self._client = client
        self._source = source
        self.state = RecorderState.idle
        self.recording: Recording | None = None
        self.transcription = ""
        self.error: str | None = None
        self.retry_count = 0

    def _reset_results(self) -> None:
        self.recording = None
        self.transcription = ""
        self.error = None
        self.retry_count = 0

    def start_capture(self) -> bool:
        """Open the microphone and begin recording.

        On permission or device failure the previous recording, transcription
        and state are kept; only ``error`` is set.

        Returns:
            True if capture started.
        """
        if self.state not in _CAN_START:
            raise InvalidRecorderStateError("start capture", self.state)
        if self._source is None:
            raise InvalidRecorderStateError("start capture", "no audio source is configured")

        try:
            self._source.start()
        except MicrophoneAccessError as exc:
            logger.error("Error accessing microphone: %s", exc)
            self.error = MICROPHONE_PERMISSION_MESSAGE
            return False

        self._reset_results()
        self.state = RecorderState.recording
        return True

    def stop_capture(self) -> Recording | None:
        """Finalize the capture into a ``Recording`` and release the microphone."""
        if self.state != RecorderState.recording or self._source is None:
            return None

        recording = self._source.stop()
        if not recording.data:
            logger.warning("Capture stopped before any audio was recorded")
        self.recording = recording
        self.state = RecorderState.stopped
        return recording

    def load_recording(
        self, data: bytes, mime_type: str = "audio/webm", source_name: str | None = None
    ) -> Recording:
        """Adopt a recording finalized elsewhere, e.g. by the browser widget or a file.

        ``source_name`` keeps the original file extension for the upload.
        """
        if self.state in _BUSY:
            raise InvalidRecorderStateError("load a recording", self.state)
        self._reset_results()
        self.recording = Recording(data=data, mime_type=mime_type, source_name=source_name)
        self.state = RecorderState.stopped
        return self.recording

    def _on_attempt(self, attempt: int) -> None:
        self.state = RecorderState.transcribing

    def transcribe(self, on_retry: Callable[[int, int], None] | None = None) -> str | None:
        """Upload the current recording; empty recordings are submitted as-is.

        Args:
            on_retry: Called with (retry number, max attempts) when a retry is
                scheduled, so a UI can show a transient "retrying" indicator.

        Returns:
            The transcription, or None if there was nothing to send or it failed
            (``error`` then holds the consolidated message).
        """
        if self.recording is None:
            return None
        if self.state in _BUSY:
            raise InvalidRecorderStateError("transcribe", self.state)

        self.state = RecorderState.transcribing
        self.error = None
        self.retry_count = 0

        def _on_retry(attempt: int, _delay: float) -> None:
            self.retry_count = attempt
            self.state = RecorderState.retry_wait
            if on_retry:
                on_retry(attempt, self._client.max_attempts)

        try:
            text = self._client.transcribe(
                self.recording, on_attempt=self._on_attempt, on_retry=_on_retry
            )
            self.transcription = text
            self.state = RecorderState.done
            return text
        except APIError as exc:
            logger.error("Transcription error: %s", exc.message)
            self.error = f"Failed to transcribe audio: {exc.message}"
            self.state = RecorderState.failed
            return None
        finally:
            # Unexpected errors propagate, but never leave the session busy
            if self.state in _BUSY:
                self.error = "Failed to transcribe audio: unexpected error"
                self.state = RecorderState.failed

    def download(self) -> TranscriptDownload | None:
        """Return the transcription as a plain-text artifact, if there is one."""
        if not self.transcription:
            return None
        return TranscriptDownload(data=self.transcription.encode("utf-8"))
