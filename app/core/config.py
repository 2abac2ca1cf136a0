"""
Application configuration using pydantic-settings.
"""
import logging
import secrets
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator, ValidationInfo
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

# Insecure default that should never be used in production
_INSECURE_DEFAULT_SECRET = "your-super-secret-key-change-in-production"
DEFAULT_SQLITE_URL = "sqlite:////data/diarum.db"

# Define the project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Diarum Service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # API
    api_prefix: str = "/api"
    enable_cors: bool = False
    # NoDecode: comma-separated string from env, parsed below
    cors_origins: Annotated[Optional[List[str]], NoDecode] = Field(default=None, validate_default=True)

    # Database Configuration
    database_url: str = DEFAULT_SQLITE_URL

    # Security
    secret_key: str = ""  # Must be set via environment variable
    access_token_expire_minutes: int = 15
    algorithm: str = "HS256"

    # Outbound HTTP
    http_client_timeout_seconds: float = 10.0
    chevereto_probe_timeout_seconds: float = 10.0  # diagnostic ping
    chevereto_upload_timeout_seconds: float = 60.0  # real data transfer

    # Logging
    log_level: str = "INFO"
    log_dir: str = "/data/logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_type(self) -> str:
        """Detect database type from configuration."""
        if self.database_url.startswith(("postgresql", "postgres")):
            return "postgresql"
        return "sqlite"

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Validate SECRET_KEY is set and secure."""
        if not v:
            env = info.data.get('environment', 'development')
            if env == 'production':
                raise ValueError(
                    "SECRET_KEY must be set in production! "
                    "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
                )
            logger.warning(
                "SECRET_KEY not set! Using auto-generated key for development. "
                "This key will change on restart and stored API keys will no longer decrypt. "
                "Set SECRET_KEY in .env for persistence."
            )
            return secrets.token_urlsafe(32)

        if v == _INSECURE_DEFAULT_SECRET:
            logger.warning(
                "Using insecure default SECRET_KEY! "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_urlsafe(32))' or openssl rand -hex 32"
            )
        elif len(v) < 32:
            logger.warning(
                f"SECRET_KEY is only {len(v)} characters long. "
                "Recommend at least 32 characters for security."
            )

        return v

    @field_validator('api_prefix')
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """API prefix always starts with a slash and never ends with one."""
        v = (v or "").strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if v is None:
            return []

        if isinstance(v, str):
            if not v.strip():
                return []
            # Handle comma-separated string from env
            return [origin.strip() for origin in v.split(',') if origin.strip()]

        if isinstance(v, list):
            return v

        return []

    @field_validator('cors_origins')
    @classmethod
    def validate_cors_origins(cls, v: Optional[List[str]], info: ValidationInfo) -> List[str]:
        """Validate CORS origins for production."""
        v = v or []
        env = info.data.get('environment', 'development')
        enable_cors = info.data.get('enable_cors', False)

        if env == 'production':
            if not enable_cors:
                return []
            if not v:
                raise ValueError(
                    "CORS_ORIGINS must be configured in production! "
                    "Set to your frontend domain(s), e.g., CORS_ORIGINS=https://yourdomain.com"
                )
            if '*' in v:
                logger.error(
                    "Wildcard (*) CORS origin not allowed in production! "
                    "Specify exact domains, e.g., https://yourdomain.com"
                )
        elif enable_cors and not v:
            return ["http://localhost:3000", "http://localhost:5173"]

        return v

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate primary database URL."""
        if not v or not v.strip():
            logger.info(
                "DATABASE_URL not provided; defaulting to SQLite at %s", DEFAULT_SQLITE_URL
            )
            return DEFAULT_SQLITE_URL

        url = v.strip()
        if not url.startswith(("sqlite", "postgresql", "postgres")):
            logger.warning(
                "DATABASE_URL uses unsupported or untested dialect '%s'. Proceed with caution.",
                url.split("://", 1)[0]
            )
        return url

    @field_validator(
        'http_client_timeout_seconds',
        'chevereto_probe_timeout_seconds',
        'chevereto_upload_timeout_seconds',
    )
    @classmethod
    def validate_timeout_settings(cls, v: float) -> float:
        """Validate timeout settings are reasonable."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        if v > 3600:  # 1 hour max
            raise ValueError("Timeout cannot exceed 3600 seconds (1 hour)")
        return v

    @model_validator(mode='after')
    def validate_production_settings(self) -> 'Settings':
        """Production sanity checks."""
        if self.environment != "production":
            return self

        errors = []
        if self.debug:
            errors.append("DEBUG must be False in production.")
        if self.secret_key == _INSECURE_DEFAULT_SECRET:
            errors.append("SECRET_KEY must not use the insecure default in production.")

        if errors:
            error_message = "Production configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_message)

        return self


# Create settings instance
settings = Settings()
