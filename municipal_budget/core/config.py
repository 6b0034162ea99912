# config.py
"""
Configuration module for the application.
Handles environment-specific settings using Pydantic v2 and pydantic-settings.
"""
from typing import Optional
from enum import Enum
from pydantic import Field, field_validator, BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    serialize: bool = False

class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"
    version: str = "1.0.0"
    title: str = "Municipal Budget Transparency API"
    description: str = "Department budget retrieval, CSV import and AI spending insights"

class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600
    create_tables: bool = True

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

class RetrySettings(BaseModel):
    """Bounded backoff applied to rate-limited generation requests."""
    max_attempts: int = 3
    backoff_base: float = 2.0

class GeminiSettings(BaseModel):
    api_key: Optional[SecretStr] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-1.5-pro"
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024
    timeout: float = 60.0
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @property
    def api_key_str(self) -> Optional[str]:
        """Return the API key as a plain string for the request query."""
        return self.api_key.get_secret_value() if self.api_key else None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    @property
    def generation_config(self) -> dict:
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }

class Settings(BaseSettings):
    """Main settings class with environment-specific configurations."""
    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API
    api_title: str = "Municipal Budget Transparency API"
    api_description: str = "Department budget retrieval, CSV import and AI spending insights"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./municipal_budget.db"
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600
    db_create_tables: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}")

    # Gemini
    gemini_api_key: Optional[SecretStr] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-pro"
    gemini_temperature: float = 0.7
    gemini_top_k: int = 40
    gemini_top_p: float = 0.95
    gemini_max_output_tokens: int = 1024
    gemini_timeout: float = 60.0
    gemini_max_attempts: int = 3
    gemini_backoff_base: float = 2.0

    # Frontend
    frontend_urls_raw: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="FRONTEND_URLS",
        exclude=True,
    )

    # Validators
    @field_validator("debug")
    @classmethod
    def debug_not_in_production(cls, v, info):
        env = info.data.get("environment")
        if v and env == Environment.PRODUCTION:
            raise ValueError("Debug mode should not be enabled in production")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("Invalid database URL format")
        return v

    @field_validator("gemini_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v):
        if v < 1:
            raise ValueError("gemini_max_attempts must be at least 1")
        return v

    @property
    def frontend_urls(self) -> list[str]:
        """Comma-separated frontend URLs from .env, parsed into a list."""
        urls = [url.strip() for url in self.frontend_urls_raw.split(",") if url.strip()]
        from urllib.parse import urlparse
        for url in urls:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Invalid URL in frontend_urls: {url}")
        return urls

    # Sub-settings via properties
    @property
    def api(self) -> APISettings:
        return APISettings(
            host=self.host,
            port=self.port,
            title=self.api_title,
            description=self.api_description,
            version=self.api_version,
        )

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            serialize=self.environment == Environment.PRODUCTION,
        )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings(
            url=self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
            create_tables=self.db_create_tables,
        )

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings(
            api_key=self.gemini_api_key,
            base_url=self.gemini_base_url,
            model=self.gemini_model,
            temperature=self.gemini_temperature,
            top_k=self.gemini_top_k,
            top_p=self.gemini_top_p,
            max_output_tokens=self.gemini_max_output_tokens,
            timeout=self.gemini_timeout,
            retry=RetrySettings(
                max_attempts=self.gemini_max_attempts,
                backoff_base=self.gemini_backoff_base,
            ),
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"

class ProductionSettings(Settings):
    debug: bool = False
    log_level: str = "INFO"
    db_create_tables: bool = False
    gemini_api_key: Optional[SecretStr] = Field(default=None, validate_default=True)

    @field_validator("gemini_api_key")
    @classmethod
    def validate_gemini_api_key(cls, v):
        if not v:
            raise ValueError("GEMINI_API_KEY is required in production")
        return v

class TestingSettings(Settings):
    database_url: str = "sqlite+aiosqlite:///:memory:"
    debug: bool = True
    log_level: str = "DEBUG"

def get_settings() -> Settings:
    """Factory to return environment-specific settings."""
    env = Settings().environment
    if env == Environment.PRODUCTION:
        return ProductionSettings()
    elif env == Environment.TESTING:
        return TestingSettings()
    return DevelopmentSettings()

# Global settings instance
settings = get_settings()
