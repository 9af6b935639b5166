from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = Field(default="Course Registration Queue")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(levelname)s %(name)s %(message)s")

    # Identity
    admin_token: str | None = Field(default=None)

    # Admission queue
    queue_enabled: bool = Field(default=True)
    queue_capacity: int = Field(default=100, ge=0)
    queue_max_idle_wait_seconds: float = Field(default=30.0, ge=0)
    queue_max_idle_active_seconds: float = Field(default=600.0, ge=0)
    queue_max_active_lifetime_seconds: float = Field(default=900.0, ge=0)
    queue_retention_window_seconds: float = Field(default=60.0, ge=0)
    queue_promotion_tick_seconds: float = Field(default=1.0, gt=0)
    queue_sweep_interval_seconds: float = Field(default=5.0, gt=0)
    queue_default_estimated_wait_seconds: float = Field(default=10.0, ge=0)
    queue_release_history_size: int = Field(default=50, ge=2)
    queue_promotion_batch_size: int = Field(default=0, ge=0)
    queue_admin_reset_enabled: bool = Field(default=False)
    queue_cookie_secure: bool = Field(default=False)
    queue_cookie_max_age_seconds: int = Field(default=3600, ge=0)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="registration-queue")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
