# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Configuration module for Interview Engine.

This module provides centralized configuration management using Pydantic Settings.
It handles environment variable loading, validation, and provides sensible defaults.
"""

from enum import Enum
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment modes."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        openai_api_key: OpenAI API key for authentication (required)
        openai_model: Model used for question and feedback generation
        temperature: Temperature for model responses (0.0-1.0, default: 0.7)
        rate_limit_requests: Requests allowed per actor per window
        rate_limit_window_ms: Fixed window length in milliseconds
        generation_timeout_seconds: Upper bound on one generation call (0 disables)
        generation_max_attempts: Attempts per generation call (1 means no retry)
        api_tokens: Bearer token to actor id mapping
        env: Application environment mode (default: development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI Configuration
    openai_api_key: str = Field(
        ...,
        description="OpenAI API key for authentication",
        min_length=1,
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use for generation",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Temperature for model responses (0.0-1.0)",
    )

    # Generation call policy
    generation_timeout_seconds: float = Field(
        default=60.0,
        ge=0.0,
        le=600.0,
        description="Timeout for a single generation call in seconds (0 disables)",
    )
    generation_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Maximum attempts per generation call (1 disables retry)",
    )
    retry_initial_backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Delay before the first retry in seconds",
    )
    retry_backoff_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Multiplier applied to the backoff delay after each retry",
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=10,
        ge=1,
        le=10000,
        description="Requests allowed per actor within one window",
    )
    rate_limit_window_ms: int = Field(
        default=60000,
        ge=1,
        description="Rate limit window length in milliseconds",
    )

    # Identity
    api_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Bearer token to actor id mapping (JSON object)",
    )

    # Application Configuration
    env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment mode",
    )

    # Database Configuration
    database_url_override: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over the DB_* fields",
    )
    db_name: str = Field(
        default="interview_engine",
        description="Database name",
    )
    db_user: str = Field(
        default="postgres",
        description="Database user",
    )
    db_password: str | None = Field(
        default=None,
        description="Database password",
    )
    db_host: str = Field(
        default="localhost",
        description="Database host",
    )
    db_port: int = Field(
        default=5432,
        ge=1,
        le=65535,
        description="Database port",
    )
    db_pool_size: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Database connection pool size",
    )
    db_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum overflow connections beyond pool size",
    )
    db_pool_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Connection pool timeout in seconds",
    )
    db_auto_create: bool = Field(
        default=True,
        description="Create missing tables on startup",
    )

    @field_validator("openai_api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is not a placeholder and strip whitespace.

        Args:
            v: The API key value to validate

        Returns:
            The validated API key

        Raises:
            ValueError: If API key is invalid or contains placeholder text
        """
        if not v.strip():
            raise ValueError("OPENAI_API_KEY cannot be empty or contain only whitespace")

        if "your_api_key" in v.lower() or "placeholder" in v.lower():
            raise ValueError(
                "OPENAI_API_KEY appears to be a placeholder. " "Please provide a valid API key."
            )

        return v.strip()

    @field_validator("api_tokens")
    @classmethod
    def validate_api_tokens(cls, v: dict[str, str]) -> dict[str, str]:
        """Reject blank tokens and blank actor ids.

        Args:
            v: Token mapping to validate

        Returns:
            The validated mapping

        Raises:
            ValueError: If any token or actor id is blank
        """
        for token, actor_id in v.items():
            if not token.strip() or not actor_id.strip():
                raise ValueError("API_TOKENS entries must have non-empty tokens and actor ids")
        return v

    @property
    def log_level(self) -> str:
        """Get the appropriate log level based on environment.

        Returns:
            Log level string (DEBUG, INFO, WARNING)
        """
        if self.env == Environment.DEVELOPMENT:
            return "DEBUG"
        elif self.env == Environment.TESTING:
            return "INFO"
        else:
            return "WARNING"

    @property
    def debug(self) -> bool:
        """Check if debug mode is enabled.

        Returns:
            True if in development environment, False otherwise
        """
        return self.env == Environment.DEVELOPMENT

    @property
    def database_url(self) -> str:
        """Get the database URL for SQLAlchemy.

        Uses DATABASE_URL when set, otherwise builds a PostgreSQL URL from the
        DB_* fields with URL-encoded credentials.

        Returns:
            SQLAlchemy database URL

        Raises:
            ValueError: If required database configuration is missing
        """
        if self.database_url_override:
            return self.database_url_override

        if not self.db_name:
            raise ValueError("DB_NAME is required for database connections")

        user = quote_plus(self.db_user)

        if self.db_password:
            password = quote_plus(self.db_password)
            return (
                f"postgresql+psycopg://{user}:{password}"
                f"@{self.db_host}:{self.db_port}/{self.db_name}"
            )
        else:
            return f"postgresql+psycopg://{user}" f"@{self.db_host}:{self.db_port}/{self.db_name}"

    def get_safe_dict(self) -> dict:
        """Get a dictionary representation with sensitive data masked.

        Returns:
            Dictionary with API key, tokens and password masked for safe logging
        """
        data = self.model_dump()
        if data.get("openai_api_key"):
            data["openai_api_key"] = "***" + data["openai_api_key"][-4:]
        if data.get("db_password"):
            data["db_password"] = "***MASKED***"
        if data.get("api_tokens"):
            data["api_tokens"] = f"***{len(data['api_tokens'])} tokens***"
        if data.get("database_url_override"):
            data["database_url_override"] = "***MASKED***"
        return data


@lru_cache
def get_settings() -> Settings:
    """Get the application settings instance.

    This function is cached to ensure only one Settings instance is created.

    Returns:
        Settings instance with loaded and validated configuration

    Raises:
        pydantic.ValidationError: If any environment variables are invalid.
    """
    return Settings()
