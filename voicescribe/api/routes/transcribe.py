"""
Transcription endpoint.

Validates the upload and hands it to the ``TranscriptionGateway`` stored on
``app.state``. Temp-file handling and provider retries live there.
"""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile

from voicescribe.core.exceptions import MissingAudioError
from voicescribe.core.models import ErrorResponse, TranscriptionResponse
from voicescribe.services.gateway import TranscriptionGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transcription"])


def get_gateway(request: Request) -> TranscriptionGateway:
    """Return the gateway built once by ``create_app()``."""
    return request.app.state.gateway


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def transcribe(
    audio: UploadFile | None = File(None),
    gateway: TranscriptionGateway = Depends(get_gateway),
) -> TranscriptionResponse:
    """Transcribe the uploaded ``audio`` part via the Whisper API."""
    logger.info("Transcription request received")
    if audio is None:
        raise MissingAudioError()

    logger.info("Audio file received: type=%s size=%s", audio.content_type, audio.size)
    # Reject before reading when the multipart parser already knows the size
    gateway.ensure_within_limit(audio.size)

    data = await audio.read()
    text = await gateway.transcribe(data, filename=audio.filename)
    return TranscriptionResponse(text=text)
