"""Application settings using Pydantic BaseSettings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str | None) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    log_file: Optional[str] = Field(default=None)
    cors_origins: str = Field(default="http://localhost:3000")
    max_request_bytes: int = Field(default=1048576)
    disconnect_poll_seconds: float = Field(default=0.5)

    # Fallback orders (comma-separated provider ids)
    text_providers: str = Field(default="")
    image_providers: str = Field(default="")
    tts_providers: str = Field(default="")

    # Legacy single-primary overrides, moved to the front of the order
    primary_text_provider: str = Field(default="")
    primary_image_provider: str = Field(default="")
    primary_tts_provider: str = Field(default="")
    audio_fallback_provider: str = Field(default="")

    # Timeouts are kept raw so a non-numeric value falls back to the default
    timeout_ms: Optional[str] = Field(default=None)
    image_timeout_ms: Optional[str] = Field(default=None)

    # Request defaults
    default_tts_voice: str = Field(default="")
    default_image_size: str = Field(default="1024x1024")
    default_system_prompt: str = Field(default="You are a helpful assistant.")

    # Vendor credentials
    openai_api_key: str = Field(default="")
    openai_tts_voice: str = Field(default="nova")
    gemini_api_key: str = Field(default="")
    xai_api_key: str = Field(default="")
    murf_api_key: str = Field(default="")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return _split_csv(self.cors_origins)

    @property
    def text_providers_list(self) -> List[str]:
        return _split_csv(self.text_providers)

    @property
    def image_providers_list(self) -> List[str]:
        return _split_csv(self.image_providers)

    @property
    def tts_providers_list(self) -> List[str]:
        return _split_csv(self.tts_providers)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator(
        "primary_text_provider",
        "primary_image_provider",
        "primary_tts_provider",
        "audio_fallback_provider",
    )
    @classmethod
    def normalize_provider_id(cls, v: str) -> str:
        return (v or "").strip().lower()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance for process-level values."""
    return Settings()


def get_request_settings() -> Settings:
    """Load settings fresh so routing changes apply without a restart."""
    return Settings()
