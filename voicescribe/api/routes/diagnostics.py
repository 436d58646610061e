"""
Provider connection diagnostics.

``GET /test`` verifies the API key is configured, lists the models the key
can see, and reports whether the transcription model is among them.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from voicescribe.api.routes.transcribe import get_gateway
from voicescribe.core.exceptions import (
    ProviderAuthError,
    TransientProviderError,
    VoiceScribeError,
)
from voicescribe.core.models import DiagnosticResponse, DiagnosticTests
from voicescribe.services.gateway import TranscriptionGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


def _diagnostic_status(exc: VoiceScribeError) -> tuple[int, str]:
    """Map a provider error to the diagnostic status code and message."""
    if isinstance(exc, ProviderAuthError):
        return 401, "Invalid or missing API key"
    if isinstance(exc, TransientProviderError):
        if exc.timed_out:
            return 504, "Connection timed out"
        return 503, "Connection reset by server"
    return 500, "Unknown error occurred"


@router.get("/test", response_model=DiagnosticResponse)
async def test_connection(gateway: TranscriptionGateway = Depends(get_gateway)):
    """Exercise the provider connection and list available models."""
    logger.info("Starting provider connection test")
    try:
        status = await gateway.stt.check_connection()
    except VoiceScribeError as exc:
        code, message = _diagnostic_status(exc)
        logger.error("Provider connection test failed: %s (%s)", message, exc.details)
        return JSONResponse(
            status_code=code,
            content={
                "status": "error",
                "error": message,
                "details": exc.details,
                "type": exc.kind,
                "code": code,
            },
        )

    model = gateway.config.model
    whisper_available = model in status.models
    if not whisper_available:
        logger.warning("Transcription model %s not found in available models", model)
    if status.rate_limits:
        logger.info("Rate limit info: %s", status.rate_limits)

    return DiagnosticResponse(
        tests=DiagnosticTests(
            api_key=True,
            connection=True,
            whisper_available=whisper_available,
            models=status.models,
        ),
        rate_limits=status.rate_limits,
    )
