"""Configuration settings loaded from environment variables."""

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_lock_ttl_seconds: int = Field(default=300, gt=0)

    # Payment authority
    payment_service_url: str = "http://localhost:8081"
    payment_connect_timeout_seconds: float = Field(default=2.0, gt=0, allow_inf_nan=False)
    payment_read_timeout_seconds: float = Field(default=5.0, gt=0, allow_inf_nan=False)
    payment_retry_max_attempts: int = Field(default=3, ge=1)
    payment_retry_backoff_seconds: float = Field(default=0.5, ge=0, allow_inf_nan=False)
    payment_retry_backoff_multiplier: float = Field(default=2.0, ge=1, allow_inf_nan=False)
    payment_breaker_failure_threshold: int = Field(default=5, ge=1)
    payment_breaker_cooldown_seconds: float = Field(default=30.0, gt=0, allow_inf_nan=False)
    payment_breaker_half_open_max_calls: int = Field(default=2, ge=1)

    # Reservation rules
    max_stay_days: int = Field(default=30, ge=1)
    bank_transfer_grace_days: int = Field(default=2, ge=0)

    # Background Jobs
    expiry_sweep_interval_seconds: int = Field(default=3600, gt=0)

    # Inbound payment updates
    payment_update_topic: str = "bank-transfer-payment-update"

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "room-reservation-service"
    environment: str = "development"

    @property
    def payment_timeout(self) -> httpx.Timeout:
        """Build the transport timeout for payment verification calls."""
        return httpx.Timeout(
            self.payment_read_timeout_seconds,
            connect=self.payment_connect_timeout_seconds,
        )


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    return Settings()  # type: ignore[call-arg]
