"""
Configuration package for codeforge.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from ``CODEFORGE_*`` variables and ``.env``."""

    provider: str = "openai"
    model: Optional[str] = None
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CODEFORGE_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    groq_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CODEFORGE_GROQ_API_KEY", "GROQ_API_KEY"),
    )
    provider_endpoint: Optional[str] = None

    default_language: str = "typescript"
    default_framework: str = "react"

    enable_validation: bool = True
    enable_optimization: bool = True
    enable_cache: bool = False

    max_retries: int = Field(default=0, ge=0)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    max_tokens: int = Field(default=4000, gt=0)
    temperature: float = Field(default=0.2, ge=0, le=2)
    max_concurrency: int = Field(default=4, ge=1)
    min_viable_length: int = Field(default=50, ge=0)
    complexity_ceiling: int = Field(default=25, ge=1)
    optimization_categories: List[str] = Field(
        default_factory=lambda: [
            "formatting",
            "readability",
            "performance",
            "best-practices",
        ]
    )

    learning_database_url: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="CODEFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
