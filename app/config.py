"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="PantryMind", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Relational store
    database_url: str = Field(
        default="postgresql+psycopg2://pantrymind@localhost:5432/pantrymind",
        description="SQLAlchemy connection URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Bearer credentials
    jwt_secret: str = Field(
        default="change-me-in-production", description="HMAC secret for access tokens"
    )
    jwt_issuer: str = Field(default="pantrymind", description="Expected token issuer")
    jwt_audience: str = Field(
        default="pantrymind-api", description="Expected token audience"
    )
    jwt_expiration: int = Field(
        default=60, ge=1, description="Access token lifetime in minutes"
    )
    jwt_algorithm: str = Field(default="HS256", description="Token signing algorithm")

    # LLM providers
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-3.5-turbo", description="OpenAI model")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="OpenAI chat completions endpoint",
    )
    gemini_api_key: Optional[str] = Field(default=None, description="Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini models endpoint",
    )
    llm_max_tokens: int = Field(default=2000, ge=1, description="Default max tokens")
    llm_temperature: float = Field(
        default=0.7, ge=0, le=2, description="Default sampling temperature"
    )
    llm_timeout_sec: float = Field(
        default=30.0, gt=0, description="Overall timeout per vendor call"
    )
    llm_retry_attempts: int = Field(
        default=3, ge=0, description="Retries on transport errors and 5xx"
    )
    llm_retry_delay_sec: float = Field(
        default=1.0, ge=0, description="Base delay between retries"
    )

    # Credits
    initial_credit_balance: int = Field(
        default=10, ge=0, description="Credits granted when a wallet is created"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origin: str = Field(
        default="http://localhost:3000", description="Single allowed CORS origin"
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed CORS methods",
    )
    cors_allow_headers: list[str] = Field(
        default=["Authorization", "Content-Type"], description="Allowed CORS headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="PantryMind API", description="API documentation title"
    )
    api_description: str = Field(
        default="Shared pantries with credit-metered AI recipes and shopping lists",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [self.cors_origin] if self.cors_origin else []

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()
