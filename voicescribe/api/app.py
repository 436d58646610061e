"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
routers, and the health endpoint. The provider configuration and gateway
are built once here and stored on ``app.state``. The module-level ``app``
instance allows ``uvicorn voicescribe.api.app:app --reload``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicescribe import __version__
from voicescribe.api.middleware.error_handler import register_error_handlers
from voicescribe.api.routes import diagnostics, transcribe
from voicescribe.core.config import ProviderConfig, Settings, get_settings
from voicescribe.core.models import HealthResponse
from voicescribe.services.gateway import TranscriptionGateway
from voicescribe.services.transcription import BaseSTT, create_stt

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, stt: BaseSTT | None = None) -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Args:
        settings: Optional settings (defaults to ``get_settings()``).
        stt: Optional provider override, e.g. a mock in tests.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ProviderConfig.from_settings(settings)
    Path(config.temp_dir).mkdir(parents=True, exist_ok=True)
    gateway = TranscriptionGateway(config, stt or create_stt(config))

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if not config.api_key:
            logger.error("OPENAI_API_KEY is not set; transcription requests will fail")
        yield
        await gateway.stt.aclose()

    app = FastAPI(
        title="VoiceScribe",
        description="Transcription gateway in front of the OpenAI Whisper API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    # -- CORS --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    app.include_router(transcribe.router)
    app.include_router(diagnostics.router)

    return app


app = create_app()
