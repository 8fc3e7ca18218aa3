"""Application configuration using Pydantic Settings."""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# NOTE: logfire.configure() is not called here. Logfire is configured once at
# application startup (main.py via observability/logfire_config.py) or in the
# pytest hooks (conftest.py).


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a default so the service starts against a local SQLite
    database and a hosted OpenAI-compatible endpoint without extra setup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production, test")
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000, http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./data/outreach.db",
        description="SQLAlchemy database URL"
    )
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables at startup (disable when running Alembic migrations)"
    )

    # Language model provider
    llm_provider: str = Field(
        default="openai",
        description="Model provider: 'openai' (hosted) or 'ollama' (self-hosted, OpenAI-compatible)"
    )
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_base_url: Optional[str] = Field(default=None, description="Override for the OpenAI API base URL")
    primary_model: str = Field(default="gpt-4o-mini", description="Primary hosted model")
    fallback_model: str = Field(default="gpt-4o", description="Fallback hosted model used after retries are exhausted")
    ollama_base_url: str = Field(default="http://localhost:11434/v1", description="Ollama OpenAI-compatible endpoint")
    ollama_model: str = Field(default="llama3.2", description="Self-hosted model name")

    # Model call policy
    llm_timeout_seconds: float = Field(
        default=120.0,
        description="Per-call timeout; local models can be slow on cold start"
    )
    llm_max_retries: int = Field(default=3, ge=1, description="Attempts per model before fallback")
    llm_backoff_base_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Backoff after attempt n is 2**n * base seconds"
    )
    llm_temperature: float = Field(default=0.7, description="Sampling temperature")
    llm_max_tokens: int = Field(default=4096, description="Maximum completion tokens")
    llm_json_mode: bool = Field(default=True, description="Send the json_object response format hint")

    # Pagination
    pagination_default_limit: int = Field(default=10, description="Default page size")
    pagination_max_limit: int = Field(default=50, description="Maximum page size")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Only the hosted and self-hosted providers are supported."""
        provider = v.strip().lower()
        if provider not in ("openai", "ollama"):
            raise ValueError(f"Unsupported llm_provider '{v}' (expected 'openai' or 'ollama')")
        return provider

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def is_self_hosted(self) -> bool:
        """True when generation runs against a local Ollama model."""
        return self.llm_provider == "ollama"

    @property
    def active_primary_model(self) -> str:
        """Model tried first for every generation phase."""
        return self.ollama_model if self.is_self_hosted else self.primary_model

    @property
    def active_fallback_model(self) -> str:
        """
        Model tried after the primary exhausts its retries.

        A single self-hosted model has nothing to fall back to, so the
        fallback equals the primary and the executor skips the fallback pass.
        """
        return self.ollama_model if self.is_self_hosted else self.fallback_model


# Create a singleton instance
settings = Settings()


def get_settings() -> "Settings":
    """Return the singleton settings instance."""
    return settings
