"""
Pydantic v2 models shared by the gateway API and the recorder client.
"""

from datetime import datetime
from enum import StrEnum
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class ErrorKind(StrEnum):
    """Structured classification of everything that can go wrong in a transcription."""

    missing_input = "missing_input"
    payload_too_large = "payload_too_large"
    transient_network = "transient_network"
    provider_failure = "provider_failure"
    configuration = "configuration"
    internal = "internal"


class TranscriptionResponse(BaseModel):
    """POST /transcribe success body."""

    text: str


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing gateway route."""

    error: str
    details: str = ""
    kind: ErrorKind


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class DiagnosticTests(BaseModel):
    """Individual checks performed by GET /test."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: bool = Field(alias="apiKey")
    connection: bool
    whisper_available: bool = Field(alias="whisperAvailable")
    models: list[str] = Field(default_factory=list)


class DiagnosticResponse(BaseModel):
    """GET /test success body."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "success"
    tests: DiagnosticTests
    rate_limits: dict[str, str] = Field(default_factory=dict, alias="rateLimits")
    message: str = "All connection tests passed successfully"


class ProviderStatus(BaseModel):
    """Internal result of probing the provider connection."""

    models: list[str] = Field(default_factory=list)
    rate_limits: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------


class RecorderState(StrEnum):
    """States of the browser-side recorder session."""

    idle = "idle"
    recording = "recording"
    stopped = "stopped"
    transcribing = "transcribing"
    retry_wait = "retry_wait"
    done = "done"
    failed = "failed"


class Recording(BaseModel):
    """A finalized in-memory audio recording."""

    data: bytes = b""
    mime_type: str = "audio/webm"
    finalized: bool = True
    source_name: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def filename(self) -> str:
        """Upload filename whose extension tells the provider the container format.

        A source file's own extension wins over one guessed from the MIME type.
        """
        suffix = PurePath(self.source_name or "").suffix.lower()
        if suffix:
            return f"recording{suffix}"
        subtype = self.mime_type.split(";", 1)[0].split("/")[-1] or "webm"
        extension = {"mpeg": "mp3", "x-wav": "wav", "wave": "wav"}.get(subtype, subtype)
        return f"recording.{extension}"


class TranscriptDownload(BaseModel):
    """Plain-text artifact offered for download."""

    filename: str = "transcription.txt"
    mime_type: str = "text/plain"
    data: bytes
