"""
IMEC Backend Configuration
Central configuration management using Pydantic Settings
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application =====
    app_name: str = "IMEC Backend"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    # Base URL used to build preview links for the test transport
    backend_url: str = "http://localhost:3000"

    # ===== CORS Configuration =====
    # Allowed origins for CORS (comma-separated list)
    cors_origins: str = "https://imec-school.com,https://www.imec-school.com,http://localhost:3000"
    cors_allow_credentials: bool = True

    # ===== Mail Transport =====
    # "smtp" sends real mail, "test" records messages in memory
    mail_transport: Literal["smtp", "test"] = "smtp"
    smtp_host: str = "smtp.hostinger.com"
    smtp_port: int = 465
    smtp_secure: bool = True  # Implicit TLS (SMTPS); STARTTLS is attempted otherwise
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_timeout: float = 10.0  # Seconds, bounds connect, handshake and transfer

    # ===== Email Addresses =====
    smtp_from: Optional[str] = None  # Falls back to smtp_user
    to_email: Optional[str] = None  # Falls back to smtp_user
    fallback_email: str = "contact@imec-school.com"  # Used by the test transport only
    auto_reply_enabled: bool = True

    # ===== Rate Limiting =====
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 50
    rate_limit_window: int = 15 * 60  # 50 requests per 15 minutes
    # Shared limiter storage; in-memory limiting is used when unset
    redis_url: Optional[str] = None

    # ===== Sentry Error Tracking =====
    sentry_dsn: Optional[str] = None
    sentry_environment: Optional[str] = None  # Falls back to environment if not set
    sentry_traces_sample_rate: float = 0.1

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed CORS origin list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
