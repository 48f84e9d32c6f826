"""
Application Configuration
=========================

Centralized configuration using Pydantic Settings.
Loads from environment variables with validation.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
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
    ENVIRONMENT: str = Field(default="development")
    API_VERSION: str = Field(default="1.0.0")

    # Server
    PORT: int = Field(default=8000, description="Port to bind to")

    # Document store
    DOCUMENT_STORE_BACKEND: str = Field(
        default="memory",
        description="'memory' for the in-process store, 'sql' for PostgreSQL",
    )
    DATABASE_URL: str = Field(default="")
    TODOS_COLLECTION: str = Field(default="todos")

    # Identity provider
    AUTH_PROVIDER: str = Field(
        default="jwt",
        description="'firebase' to verify Firebase ID tokens, 'jwt' for locally signed tokens",
    )
    FIREBASE_PROJECT_ID: Optional[str] = Field(default=None)
    JWT_SECRET: str = Field(default="change-this-secret-in-production")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=1440)  # 24 hours

    # Blob storage (image attachments)
    BLOB_STORE_BACKEND: str = Field(default="memory")
    AZURE_STORAGE_CONNECTION_STRING: str = Field(default="")
    AZURE_STORAGE_ACCOUNT_NAME: str = Field(default="")
    AZURE_STORAGE_CONTAINER: str = Field(default="todo-tracker-dev")
    BLOB_KEY_PREFIX: str = Field(default="todo-images")
    MAX_IMAGE_UPLOAD_SIZE_MB: int = Field(default=5)
    ALLOWED_IMAGE_FORMATS: str = Field(default="jpg,jpeg,png,gif,webp")

    # Route gate
    SESSION_COOKIE_NAME: str = Field(default="session")
    SESSION_COOKIE_MAX_AGE: int = Field(default=86400, gt=0)  # 24 hours
    PUBLIC_PATHS: str = Field(default="/login,/signup")
    GATED_PATHS: str = Field(default="/,/login,/signup")
    LOGIN_PATH: str = Field(default="/login")
    HOME_PATH: str = Field(default="/")

    # External calls
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    # App Configuration
    ALLOWED_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:8000")

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def allowed_image_formats_list(self) -> List[str]:
        """Parse ALLOWED_IMAGE_FORMATS into a list."""
        return [fmt.strip().lower() for fmt in self.ALLOWED_IMAGE_FORMATS.split(",") if fmt.strip()]

    @property
    def public_paths_list(self) -> List[str]:
        return [p.strip() for p in self.PUBLIC_PATHS.split(",") if p.strip()]

    @property
    def gated_paths_list(self) -> List[str]:
        return [p.strip() for p in self.GATED_PATHS.split(",") if p.strip()]

    @property
    def max_image_upload_bytes(self) -> int:
        return self.MAX_IMAGE_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def database_url_async(self) -> str:
        """Convert database URL to async format for asyncpg."""
        if self.DATABASE_URL:
            return self.DATABASE_URL.replace(
                "postgresql://", "postgresql+asyncpg://"
            )
        return ""

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"

    @field_validator("DOCUMENT_STORE_BACKEND", "BLOB_STORE_BACKEND", "AUTH_PROVIDER")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Ensure JWT secret is sufficiently long."""
        if len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Export a default settings instance
settings = get_settings()
