"""
Favorite Places AI Backend - Application Configuration
=======================================================

What:  Centralized configuration using Pydantic Settings.
How:   Values come from environment variables (or a .env file), are validated
       on load, and exposed through the singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are safe for local development. Production deployments must
    provide GEMINI_API_KEY and should restrict CORS_ORIGIN.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # API key from https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key for text generation",
    )
    gemini_model: str = Field(default="gemini-2.5-flash-lite")

    # Unset means the SDK's own behaviour applies; no timeout is imposed here.
    gemini_request_timeout: Optional[float] = Field(default=None, gt=0, le=600)

    # ── Google Cloud Vision ───────────────────────────────────────────────
    # Credentials come from GOOGLE_APPLICATION_CREDENTIALS (standard ADC).
    # Disabled or unconstructible client → tag suggestions run without image signal.
    vision_enabled: bool = Field(default=True)

    # ── Environment ───────────────────────────────────────────────────────
    # Only "development" exposes underlying error details in 500 responses.
    environment: str = Field(default="production")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid = {"development", "production", "test"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid environment '{v}'. Must be one of: {valid}")
        return lower

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    # ── CORS ──────────────────────────────────────────────────────────────
    # "*" or a comma-separated list of origins
    cors_origin: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        if self.cors_origin.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting (AI routes only) ────────────────────────────────────
    rate_limit_window_seconds: int = Field(default=900, ge=1, le=86400)
    rate_limit_max_requests: int = Field(default=100, ge=1, le=10000)

    # ── Generation Retry ──────────────────────────────────────────────────
    # Total attempts per generation call. 1 = single shot (no retry).
    generation_max_attempts: int = Field(default=1, ge=1, le=5)
    retry_min_wait: float = Field(default=1, ge=0, le=30)
    retry_max_wait: float = Field(default=8, ge=0, le=120)

    # ── Smart Search ──────────────────────────────────────────────────────
    # When true, ids not present in the submitted places are dropped.
    search_restrict_to_candidates: bool = Field(default=False)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key) and self.gemini_api_key != "your_gemini_api_key_here"

    def validate_required_for_production(self) -> None:
        """
        Checks that critical settings are present.

        Called from the app lifespan; raises ValueError listing every problem.
        """
        errors = []
        if not self.gemini_configured:
            errors.append(
                "GEMINI_API_KEY is not set. "
                "Get a key at https://aistudio.google.com/app/apikey"
            )
        if self.retry_max_wait < self.retry_min_wait:
            errors.append("RETRY_MAX_WAIT must be greater than or equal to RETRY_MIN_WAIT")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance imported throughout the application
settings = Settings()
