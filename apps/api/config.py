"""
Application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./traewelling.db"

    # Redis
    REDIS_URL: str = "redis://localhost:6379"

    # API
    APP_NAME: str = "Träwelling"
    APP_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Peers whose X-Forwarded-For header is trusted for client throttling
    TRUSTED_PROXIES: List[str] = []

    # X (Twitter) OAuth2 app
    TWITTER_CLIENT_ID: str = ""
    TWITTER_CLIENT_SECRET: str = ""
    TWITTER_API_BASE_URL: str = "https://api.x.com"
    TWITTER_HTTP_TIMEOUT_SECONDS: float = 10.0

    # Mail
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_STARTTLS: bool = True
    SMTP_FROM: str = "no-reply@traewelling.local"
    MAIL_VERIFICATION_LIMIT: int = 1
    MAIL_VERIFICATION_WINDOW_SECONDS: int = 60
    EMAIL_VERIFICATION_EXPIRATION_HOURS: int = 48

    # Storage
    PROFILE_PICTURE_DIR: str = "/tmp/trwl_avatars"
    PROFILE_PICTURE_MAX_BYTES: int = 5 * 1024 * 1024

    # Export
    EXPORT_MAX_DAYS: int = 365
    APP_TIMEZONE: str = "UTC"

    # Security
    JWT_SECRET: str = "change_me_in_production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24
    ENCRYPTION_KEY: str = "change_me_32_byte_key_for_prod"
    AUTO_CREATE_DB_SCHEMA: bool = True

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def twitter_configured() -> bool:
    """Whether X OAuth client credentials are present."""
    return bool((settings.TWITTER_CLIENT_ID or "").strip() and (settings.TWITTER_CLIENT_SECRET or "").strip())


def validate_security_settings() -> None:
    """Fail fast when insecure default secrets are still configured."""
    insecure_values = {
        "",
        "change_me_in_production",
        "change_me_32_byte_key_for_prod",
        "your_jwt_secret_change_in_production",
        "your_32_byte_encryption_key_here",
    }
    jwt_secret = (settings.JWT_SECRET or "").strip()
    encryption_key = (settings.ENCRYPTION_KEY or "").strip()

    if jwt_secret in insecure_values or len(jwt_secret) < 24:
        raise ValueError("JWT_SECRET is insecure. Configure a strong non-default secret (>=24 chars).")
    if encryption_key in insecure_values or len(encryption_key) < 32:
        raise ValueError("ENCRYPTION_KEY is insecure. Configure a strong non-default key (>=32 chars).")
