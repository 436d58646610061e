"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.

``ProviderConfig`` is the immutable slice of settings the transcription
gateway needs. It is built once at application startup and handed to the
gateway explicitly rather than read from module-level state.
"""

import tempfile
from functools import lru_cache

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

# Whisper API upload limit
MAX_UPLOAD_BYTES = 25 * 1024 * 1024


class Settings(BaseSettings):
    """VoiceScribe settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        openai_api_key: Key for the OpenAI transcription API.
        max_upload_bytes: Largest audio payload the gateway will forward.
        gateway_retry_attempts: Provider calls per request before giving up.
        client_max_attempts: Upload attempts the recorder makes per transcription.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Provider (OpenAI Whisper API) ---
    openai_api_key: str = ""  # Absence is reported by GET /test
    transcription_model: str = "whisper-1"
    transcription_language: str = "en"  # ISO 639-1 source language hint
    transcription_temperature: float = 0.2  # Low temperature biases toward deterministic output
    provider_timeout: float = 300.0  # Seconds per provider HTTP call
    provider_max_retries: int = 0  # SDK-level retries; the gateway retries on its own
    provider_keepalive_connections: int = 20
    provider_keepalive_expiry: float = 120.0

    # --- Gateway ---
    gateway_retry_attempts: int = 3
    gateway_retry_delay: float = 2.0  # Fixed delay between provider attempts
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    temp_dir: str = ""  # Empty = system temp directory

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:3000",  # Dev frontend
    ]

    # --- Recorder / uploader ---
    api_base_url: str = "http://localhost:8000"
    client_timeout: float = 120.0  # Seconds per upload attempt
    client_max_attempts: int = 3
    client_retry_base_delay: float = 1.0  # Linear backoff: base * attempt index


class ProviderConfig(BaseModel):
    """Read-only provider and gateway configuration shared across requests."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    model: str = "whisper-1"
    language: str = "en"
    response_format: str = "text"
    temperature: float = 0.2
    timeout: float = 300.0
    max_retries: int = 0
    keepalive_connections: int = 20
    keepalive_expiry: float = 120.0
    retry_attempts: int = 3
    retry_delay: float = 2.0
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    temp_dir: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        """Derive the gateway configuration from application settings."""
        return cls(
            api_key=settings.openai_api_key,
            model=settings.transcription_model,
            language=settings.transcription_language,
            temperature=settings.transcription_temperature,
            timeout=settings.provider_timeout,
            max_retries=settings.provider_max_retries,
            keepalive_connections=settings.provider_keepalive_connections,
            keepalive_expiry=settings.provider_keepalive_expiry,
            retry_attempts=settings.gateway_retry_attempts,
            retry_delay=settings.gateway_retry_delay,
            max_upload_bytes=settings.max_upload_bytes,
            temp_dir=settings.temp_dir or tempfile.gettempdir(),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
