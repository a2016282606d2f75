# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr
from typing import List


class Settings(BaseSettings):
    """
    Settings for the TaskCraft API, read from the environment and .env
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database Settings
    DATABASE_URL: str = Field(..., description="Async SQLAlchemy URL (postgresql+asyncpg or sqlite+aiosqlite)")

    # JWT Authentication Settings
    JWT_SECRET_KEY: SecretStr = Field(..., description="Secret key for signing JWT tokens")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Application Settings
    ENVIRONMENT: str = Field("development", description="Environment name")
    LOG_LEVEL: str = Field("INFO", description="Log level")

    # Logging Configuration
    ENABLE_JSON_LOGGING: bool = Field(True, description="Enable JSON structured logging")

    # CORS Settings
    CORS_ORIGINS: str = Field(
        "http://localhost:3000,http://127.0.0.1:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Rate Limiting Settings
    RATE_LIMIT_ENABLED: bool = Field(True, description="Enable rate limiting")
    DEFAULT_RATE_LIMIT: str = Field("200/minute", description="Default rate limit")
    AUTH_RATE_LIMIT: str = Field("10/minute", description="Signup/login rate limit")

    # Performance Settings
    DB_POOL_SIZE: int = Field(20, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(0, description="Database max overflow connections")

    # Domain Settings
    UNDO_WINDOW_SECONDS: int = Field(10, description="Seconds an undo entry stays restorable")
    COMMENT_EDIT_WINDOW_MINUTES: int = Field(15, description="Minutes a comment stays editable by its author")
    DEFAULT_PAGE_SIZE: int = Field(25, description="Page size when none is requested")
    MAX_PAGE_SIZE: int = Field(100, description="Upper bound for requested page sizes")

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS_ORIGINS string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def should_use_json_logging(self) -> bool:
        """Use JSON logging in production or when explicitly enabled"""
        return self.ENVIRONMENT == "production" or self.ENABLE_JSON_LOGGING


# Create settings instance
settings = Settings()
