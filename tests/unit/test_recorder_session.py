"""Unit tests for the RecorderSession state machine.

Uses an in-memory AudioSource and a mocked APIClient to exercise capture,
permission failures, transcription outcomes, the retry indicator, and the
plain-text download artifact.
"""

from unittest.mock import MagicMock

import pytest

from voicescribe.core.exceptions import InvalidRecorderStateError
from voicescribe.core.models import Recording, RecorderState
from voicescribe.ui.api_client import APIClient, APIError
from voicescribe.ui.capture import AudioSource, MicrophoneAccessError
from voicescribe.ui.session import MICROPHONE_PERMISSION_MESSAGE, RecorderSession


class FakeSource(AudioSource):
    """AudioSource that returns canned bytes and can simulate a denied microphone."""

    def __init__(self, data: bytes = b"captured", denied: bool = False) -> None:
        self.data = data
        self.denied = denied
        self.started = 0
        self.stopped = 0

    def start(self) -> None:
        if self.denied:
            raise MicrophoneAccessError("Permission denied")
        self.started += 1

    def stop(self) -> Recording:
        self.stopped += 1
        return Recording(data=self.data, mime_type="audio/wav")


@pytest.fixture
def client():
    api = MagicMock(spec=APIClient)
    api.max_attempts = 3
    api.transcribe.return_value = "hello world"
    return api


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def session(client, source):
    return RecorderSession(client, source)


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


class TestCapture:
    def test_start_then_stop_produces_recording(self, session, source):
        assert session.start_capture() is True
        assert session.state == RecorderState.recording

        recording = session.stop_capture()

        assert recording.data == b"captured"
        assert recording.finalized is True
        assert session.state == RecorderState.stopped
        assert source.stopped == 1

    def test_permission_denied_leaves_state_untouched(self, client):
        session = RecorderSession(client, FakeSource(denied=True))
        session.load_recording(b"previous", "audio/webm")

        assert session.start_capture() is False

        assert session.error == MICROPHONE_PERMISSION_MESSAGE
        assert session.state == RecorderState.stopped
        assert session.recording.data == b"previous"

    def test_new_capture_discards_previous_result(self, session):
        session.start_capture()
        session.stop_capture()
        session.transcribe()
        assert session.state == RecorderState.done

        session.start_capture()

        assert session.recording is None
        assert session.transcription == ""
        assert session.error is None

    def test_cannot_start_while_recording(self, session):
        session.start_capture()

        with pytest.raises(InvalidRecorderStateError):
            session.start_capture()

    def test_stop_when_idle_is_noop(self, session, source):
        assert session.stop_capture() is None
        assert source.stopped == 0
        assert session.state == RecorderState.idle

    def test_start_without_source_raises(self, client):
        session = RecorderSession(client)

        with pytest.raises(InvalidRecorderStateError):
            session.start_capture()

    def test_empty_capture_still_finalizes(self, client):
        session = RecorderSession(client, FakeSource(data=b""))
        session.start_capture()

        recording = session.stop_capture()

        assert recording.size == 0
        assert session.state == RecorderState.stopped


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TestTranscribe:
    def test_success_moves_to_done(self, session, client):
        session.load_recording(b"clip", "audio/webm")

        assert session.transcribe() == "hello world"

        assert session.state == RecorderState.done
        assert session.transcription == "hello world"
        client.transcribe.assert_called_once()
        assert client.transcribe.call_args.args[0].data == b"clip"

    def test_failure_surfaces_single_consolidated_error(self, session, client):
        client.transcribe.side_effect = APIError("ECONNRESET", category="http", status_code=503)
        session.load_recording(b"clip")

        assert session.transcribe() is None

        assert session.state == RecorderState.failed
        assert session.error == "Failed to transcribe audio: ECONNRESET"

    def test_retry_indicator_updates(self, session, client):
        observed = []

        def fake_transcribe(recording, on_attempt=None, on_retry=None):
            on_attempt(1)
            on_retry(1, 1.0)
            observed.append((session.state, session.retry_count))
            on_attempt(2)
            observed.append((session.state, session.retry_count))
            return "after retry"

        client.transcribe.side_effect = fake_transcribe
        indicator = []
        session.load_recording(b"clip")

        session.transcribe(on_retry=lambda n, total: indicator.append((n, total)))

        assert observed == [(RecorderState.retry_wait, 1), (RecorderState.transcribing, 1)]
        assert indicator == [(1, 3)]
        assert session.state == RecorderState.done
        assert session.error is None

    def test_without_recording_is_noop(self, session, client):
        assert session.transcribe() is None
        client.transcribe.assert_not_called()

    def test_empty_recording_is_submitted(self, client):
        session = RecorderSession(client, FakeSource(data=b""))
        session.start_capture()
        session.stop_capture()

        session.transcribe()

        client.transcribe.assert_called_once()
        assert client.transcribe.call_args.args[0].size == 0

    def test_unexpected_error_does_not_leave_session_busy(self, session, client):
        client.transcribe.side_effect = RuntimeError("boom")
        session.load_recording(b"clip")

        with pytest.raises(RuntimeError):
            session.transcribe()

        assert session.state == RecorderState.failed
        assert session.error == "Failed to transcribe audio: unexpected error"
        session.load_recording(b"next-take")
        assert session.state == RecorderState.stopped

    def test_loaded_file_keeps_its_extension(self, session, client):
        session.load_recording(b"m4a-bytes", "application/octet-stream", source_name="memo.M4A")

        session.transcribe()

        assert client.transcribe.call_args.args[0].filename == "recording.m4a"


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------


class TestDownload:
    def test_download_returns_plain_text(self, session):
        session.load_recording(b"clip")
        session.transcribe()

        artifact = session.download()

        assert artifact.filename == "transcription.txt"
        assert artifact.mime_type == "text/plain"
        assert artifact.data == b"hello world"

    def test_download_without_transcription(self, session):
        assert session.download() is None
