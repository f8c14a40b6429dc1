"""Configuration for the backend using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent.parent  # src/aidbridge/ → project root


class Settings(BaseSettings):
    """All backend settings, loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Azure OpenAI — reply model
    # Leave the key empty to answer every message with a canned reply.
    # ------------------------------------------------------------------
    azure_openai_api_key: str = ""
    azure_openai_endpoint: str = ""
    azure_openai_api_version: str = "2025-01-01-preview"
    azure_openai_chat_deployment: str = "gpt-4o-mini"

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------
    reply_history_limit: int = 10
    seed_sample_data: bool = True

    # ------------------------------------------------------------------
    # Auth (JWT)
    # ------------------------------------------------------------------
    jwt_secret: str = "dev-secret-change-in-production!!"
    jwt_expiry_hours: int = 24

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False

    # ------------------------------------------------------------------
    # Observability — "off", "logfire" or "otel"
    # ------------------------------------------------------------------
    observability: str = "off"
    otel_service_name: str = "aidbridge-backend"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318"
    otel_console_exporter: bool = False

    @property
    def reply_model_configured(self) -> bool:
        """True when enough Azure settings are present to call the model."""
        return bool(self.azure_openai_api_key and self.azure_openai_endpoint)

    def validate_runtime(self) -> None:
        """Check values that cannot be validated field by field.

        Call this at application startup (not at import time) so that
        tests can override settings before validation runs.
        """
        if self.azure_openai_api_key and not self.azure_openai_endpoint:
            raise ValueError("AZURE_OPENAI_API_KEY is set but AZURE_OPENAI_ENDPOINT is not.")
        if self.reply_history_limit < 1:
            raise ValueError("REPLY_HISTORY_LIMIT must be at least 1.")
        if self.observability.lower() not in ("off", "logfire", "otel"):
            raise ValueError("OBSERVABILITY must be one of: off, logfire, otel.")


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings singleton."""
    return Settings()
