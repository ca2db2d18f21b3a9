"""Configuration management for Color Quiz.

This module handles configuration loading and validation using Pydantic
Settings for type safety and environment variable support.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from colorquiz.utils.constants import DEFAULT_CATEGORIES, DEFAULT_LOCALE
from colorquiz.utils.logger import setup_logging
from colorquiz.utils.validators import validate_categories


class Settings(BaseSettings):
    """Application settings with validation and type hints."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Settings
    APP_NAME: str = Field(default="Color Quiz", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    APP_ENV: str = Field(
        default="development",
        description="Application environment",
        pattern="^(development|test|staging|production)$",
    )
    APP_DEBUG: bool = Field(default=True, description="Debug mode")
    APP_HOST: str = Field(default="0.0.0.0", description="Application host")
    APP_PORT: int = Field(default=8000, description="Application port", ge=1, le=65535)

    # API Settings
    API_V1_PREFIX: str = Field(default="/api/v1", description="API v1 prefix")
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )

    # Database Configuration
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL",
    )
    MONGODB_DB_NAME: str = Field(
        default="colorquiz", description="MongoDB database name"
    )
    MONGODB_MAX_POOL_SIZE: int = Field(
        default=50, description="MongoDB max connection pool size", ge=1
    )
    MONGODB_MIN_POOL_SIZE: int = Field(
        default=5, description="MongoDB min connection pool size", ge=0
    )
    MONGODB_MAX_IDLE_TIME_MS: int = Field(
        default=10000, description="MongoDB max idle time in milliseconds", ge=0
    )
    MONGODB_CONNECT_TIMEOUT_MS: int = Field(
        default=10000, description="MongoDB connection timeout in milliseconds", ge=1000
    )
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=5000, description="MongoDB server selection timeout in milliseconds", ge=100
    )

    # Redis Configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    REDIS_PASSWORD: Optional[str] = Field(default=None, description="Redis password")
    REDIS_MAX_CONNECTIONS: int = Field(
        default=50, description="Redis max connections", ge=1
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, description="Redis health check interval in seconds", ge=0
    )

    # Feature Flags
    ENABLE_CACHE: bool = Field(default=True, description="Cache the question bank in Redis")
    ENABLE_API_DOCS: bool = Field(default=True, description="Enable API documentation")
    ENABLE_METRICS: bool = Field(default=True, description="Enable metrics collection")
    QUESTION_CACHE_TTL_SECONDS: int = Field(
        default=3600, description="TTL of cached question bank documents", ge=1
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    LOG_DIR: str = Field(default="logs", description="Directory for log files")

    # Test Configuration
    TEST_MODE: bool = Field(default=False, description="Test mode enabled")
    TEST_DATABASE_URL: str = Field(
        default="mongodb://localhost:27017",
        description="Test database URL",
    )
    TEST_DATABASE_NAME: str = Field(
        default="colorquiz_test", description="Test database name"
    )
    TEST_REDIS_URL: str = Field(
        default="redis://localhost:6379/15", description="Test Redis URL"
    )

    # Quiz Configuration
    QUIZ_QUESTION_COUNT: int = Field(
        default=50, description="Number of questions assigned to each attempt", ge=1
    )
    RANKING_QUESTION_COUNT: int = Field(
        default=12, description="Number of questions in a ranking session", ge=1
    )
    QUIZ_CATEGORIES: List[str] = Field(
        default=list(DEFAULT_CATEGORIES),
        description="Scoring categories in display order",
    )
    DEFAULT_LOCALE: str = Field(default=DEFAULT_LOCALE, description="Fallback locale")
    SUPPORTED_LOCALES: List[str] = Field(
        default=["en", "es"], description="Locales the question bank is translated into"
    )

    @field_validator("MONGODB_URL", "TEST_DATABASE_URL")
    @classmethod
    def validate_mongodb_url(cls, v: str) -> str:
        """Validate MongoDB URL format."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MongoDB URL must start with mongodb:// or mongodb+srv://")
        return v

    @field_validator("REDIS_URL", "TEST_REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://")):
            raise ValueError("Redis URL must start with redis:// or rediss://")
        return v

    @field_validator("QUIZ_CATEGORIES")
    @classmethod
    def validate_quiz_categories(cls, v: List[str]) -> List[str]:
        """Validate the configured category set."""
        result = validate_categories(v)
        if not result.is_valid:
            raise ValueError(result.errors[0])
        return result.cleaned_value

    @field_validator("SUPPORTED_LOCALES")
    @classmethod
    def normalize_locales(cls, v: List[str]) -> List[str]:
        return [locale.strip().lower() for locale in v if locale.strip()]

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings after all fields are set."""
        if self.APP_ENV == "test":
            self.TEST_MODE = True

        if self.TEST_MODE:
            self.ENABLE_METRICS = False

        if self.DEFAULT_LOCALE not in self.SUPPORTED_LOCALES:
            self.SUPPORTED_LOCALES = [self.DEFAULT_LOCALE, *self.SUPPORTED_LOCALES]

        if self.APP_ENV == "production":
            self.APP_DEBUG = False
            self.LOG_LEVEL = "INFO" if self.LOG_LEVEL == "DEBUG" else self.LOG_LEVEL

        return self

    def get_database_url(self) -> str:
        """Get the appropriate database URL based on environment."""
        if self.is_test():
            return self.TEST_DATABASE_URL
        return self.MONGODB_URL

    def get_database_name(self) -> str:
        """Get the appropriate database name based on environment."""
        if self.is_test():
            return self.TEST_DATABASE_NAME
        return self.MONGODB_DB_NAME

    def get_redis_url(self) -> str:
        """Get the appropriate Redis URL based on environment."""
        if self.is_test():
            return self.TEST_REDIS_URL
        return self.REDIS_URL

    def resolve_locale(self, locale: Optional[str]) -> str:
        """Map a requested locale onto a supported one.

        Args:
            locale: Requested locale, e.g. ``"es"`` or ``"es-MX"``

        Returns:
            str: A supported locale, ``DEFAULT_LOCALE`` when unsupported
        """
        if not locale:
            return self.DEFAULT_LOCALE
        candidate = locale.strip().lower().replace("_", "-")
        if candidate in self.SUPPORTED_LOCALES:
            return candidate
        language = candidate.split("-", 1)[0]
        if language in self.SUPPORTED_LOCALES:
            return language
        return self.DEFAULT_LOCALE

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test" or self.TEST_MODE


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings instance
    """
    settings = Settings()

    setup_logging(
        environment=settings.APP_ENV,
        log_level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
    )

    return settings
