"""
Global error handling middleware for the FastAPI application.

Catches VoiceScribeError subclasses, Pydantic validation errors, and
unhandled exceptions, converting them into the ``{error, details, kind}``
JSON envelope the recorder understands.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voicescribe.core.exceptions import VoiceScribeError
from voicescribe.core.models import ErrorKind, ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: str, details: str, kind: ErrorKind) -> JSONResponse:
    body = ErrorResponse(error=error, details=details, kind=kind)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``VoiceScribeError``: maps domain errors to their status code.
    2. ``RequestValidationError``: Pydantic validation failures (422).
    3. ``Exception``: catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(VoiceScribeError)
    async def voicescribe_error_handler(_request: Request, exc: VoiceScribeError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        logger.error("Request failed: kind=%s status=%d details=%s", exc.kind, exc.status_code, exc.details)
        return _envelope(exc.status_code, exc.error, exc.details, exc.kind)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors (malformed body/params)."""
        return _envelope(422, "Invalid request", str(exc), ErrorKind.missing_input)

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler. Keeps stack traces from leaking to clients."""
        logger.exception("Unhandled server error: %s", exc)
        return _envelope(500, "Internal server error", "An unexpected error occurred", ErrorKind.internal)
