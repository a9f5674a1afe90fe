"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"
    log_dir: str = "logs"

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    # LLM providers
    ai_provider: str | None = None
    openai_api_key: str | None = None
    gemini_api_key: str | None = None

    # Per-task model overrides
    openai_report_model: str = "gpt-4o"
    openai_analysis_model: str = "gpt-4o-mini"
    gemini_report_model: str = "gemini-2.5-flash"
    gemini_analysis_model: str = "gemini-2.5-flash-lite"

    # Resilience
    openai_max_retries: int = 2
    llm_timeout_seconds: float = 60.0
    llm_retry_all_providers: bool = False

    # CORS
    cors_origins: str = "*"

    # Rate limiting
    rate_limit_enabled: bool = True
    generate_rate_limit: str = "30/minute"

    @field_validator("openai_max_retries")
    @classmethod
    def clamp_retries(cls, v: int) -> int:
        return max(0, v)

    @field_validator("ai_provider", "openai_api_key", "gemini_api_key")
    @classmethod
    def blank_as_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
