"""
VoiceScribe exception hierarchy.

All application-specific exceptions inherit from VoiceScribeError, which
carries the structured ``ErrorKind`` and the HTTP status it maps to. The
API middleware layer serializes them without inspecting message text.
"""

from voicescribe.core.models import ErrorKind


class VoiceScribeError(Exception):
    """Base exception for all VoiceScribe errors."""

    def __init__(
        self,
        error: str = "An unexpected error occurred",
        details: str = "",
        kind: ErrorKind = ErrorKind.internal,
        status_code: int = 500,
    ) -> None:
        self.error = error
        self.details = details
        self.kind = kind
        self.status_code = status_code
        super().__init__(details or error)

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.transient_network


class MissingAudioError(VoiceScribeError):
    """Raised when the upload has no ``audio`` part."""

    def __init__(self) -> None:
        super().__init__(
            error="No audio file provided",
            details="The multipart form field 'audio' is required",
            kind=ErrorKind.missing_input,
            status_code=400,
        )


class PayloadTooLargeError(VoiceScribeError):
    """Raised when the audio payload exceeds the provider's upload ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            error="File too large",
            details=f"Audio file must be less than {limit // (1024 * 1024)}MB (got {size} bytes)",
            kind=ErrorKind.payload_too_large,
            status_code=400,
        )


class TransientProviderError(VoiceScribeError):
    """Raised when the provider call fails with a reset connection or a timeout."""

    def __init__(self, details: str = "", timed_out: bool = False) -> None:
        self.timed_out = timed_out
        super().__init__(
            error="Connection timeout. Please try with a shorter audio clip.",
            details=details,
            kind=ErrorKind.transient_network,
            status_code=503,
        )


class ProviderFailureError(VoiceScribeError):
    """Raised for any non-transient provider error."""

    def __init__(
        self,
        details: str = "",
        kind: ErrorKind = ErrorKind.provider_failure,
    ) -> None:
        super().__init__(
            error="Failed to process audio",
            details=details,
            kind=kind,
            status_code=500,
        )


class ProviderAuthError(ProviderFailureError):
    """Raised when the provider API key is missing or rejected."""

    def __init__(self, details: str = "OpenAI API key is missing") -> None:
        super().__init__(details=details, kind=ErrorKind.configuration)


class InvalidRecorderStateError(VoiceScribeError):
    """Raised when a recorder operation is not allowed in the current state."""

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(
            error="Invalid recorder state",
            details=f"Cannot {operation} while {state}",
            kind=ErrorKind.internal,
            status_code=409,
        )
