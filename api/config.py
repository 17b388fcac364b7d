"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from core.models import DEFAULT_AUTHOR, DEFAULT_TITLE


def _read_secret_file(path: str, env_name: str) -> str:
    """Read a secret value from file and return stripped content."""
    try:
        value = Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ValueError(f"{env_name} points to unreadable file: {path}") from exc

    if not value:
        raise ValueError(f"{env_name} points to empty file: {path}")

    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="development", description="Environment: development, stage, prod")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )

    # Conversion limits
    max_treatment_chars: int = Field(
        default=50_000, gt=0, description="Longest treatment accepted, in characters"
    )
    max_upload_bytes: int = Field(
        default=1024 * 1024, gt=0, description="Largest treatment file upload, in bytes"
    )

    # Output
    output_dir: Path = Field(default=Path("output"), description="Directory for generated .fdx files")
    default_title: str = Field(default=DEFAULT_TITLE, description="Title used when none is given")
    default_author: str = Field(default=DEFAULT_AUTHOR, description="Author used when none is given")

    # Operational endpoint controls
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics endpoint")

    # LLM Provider
    llm_provider: str = Field(
        default="openai",
        description="LLM provider: openai, mistral_cloud, or ollama",
    )
    llm_temperature: float = Field(
        default=0.2, ge=0.0, le=2.0, description="Sampling temperature for structuring"
    )
    llm_max_tokens: int = Field(
        default=8000, gt=0, description="Maximum tokens in the structuring reply"
    )

    # OpenAI-compatible Configuration
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_api_key_file: str | None = Field(
        default=None,
        description="Optional file path containing OpenAI API key",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", description="OpenAI-compatible base URL"
    )
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI model name")
    openai_timeout: int = Field(default=120, description="OpenAI request timeout in seconds")

    # Mistral Cloud Configuration
    mistral_api_key: str = Field(default="", description="Mistral API key")
    mistral_api_key_file: str | None = Field(
        default=None,
        description="Optional file path containing Mistral API key",
    )
    mistral_model: str = Field(default="mistral-large-latest", description="Mistral model name")
    mistral_timeout: int = Field(default=120, description="Mistral request timeout in seconds")

    # Ollama Configuration
    ollama_base_url: str = Field(default="http://ollama:11434", description="Ollama base URL")
    ollama_model: str = Field(
        default="mistral", description="Ollama model name (e.g., mistral, llama3)"
    )
    ollama_timeout: int = Field(default=120, description="Ollama request timeout in seconds")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            value = v.strip()
            if not value:
                return []
            if value.startswith("["):
                parsed = json.loads(value)
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON value must be a list")
                return [str(origin).strip() for origin in parsed if str(origin).strip()]
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(v, list):
            return [str(origin).strip() for origin in v if str(origin).strip()]
        return v

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Normalize and check the provider name."""
        value = v.strip().lower()
        if value not in {"openai", "mistral_cloud", "ollama"}:
            raise ValueError("LLM_PROVIDER must be one of: openai, mistral_cloud, ollama")
        return value

    @model_validator(mode="before")
    @classmethod
    def load_secrets_from_files(cls, data: Any) -> Any:
        """Allow *_FILE settings to populate sensitive values from mounted secrets."""
        if not isinstance(data, dict):
            return data

        settings = dict(data)
        file_mapping = {
            "openai_api_key_file": "openai_api_key",
            "mistral_api_key_file": "mistral_api_key",
        }

        for file_field, target_field in file_mapping.items():
            file_path = settings.get(file_field)
            if file_path:
                settings[target_field] = _read_secret_file(file_path, file_field.upper())

        return settings

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env in {"prod", "production"}

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.env == "development"

    @model_validator(mode="after")
    def validate_production_security(self) -> "Settings":
        """Enforce a complete configuration when running in production."""
        if not self.is_production:
            return self

        if self.debug:
            raise ValueError("DEBUG must be false in production")

        if self.llm_provider == "openai" and not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required in production")
        if self.llm_provider == "mistral_cloud" and not self.mistral_api_key:
            raise ValueError("MISTRAL_API_KEY is required in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
