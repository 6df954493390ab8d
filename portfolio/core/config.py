"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend choices (storage, notifications) are validated
at load time.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Defaults run the service fully in memory with log-only notifications,
    which is what tests and local development use.
    """

    # App
    app_name: str = "portfolio-workflows"
    app_version: str = "1.0.0"
    debug: bool = False

    # Document store: "memory" (process-local) or "local" (JSON files under storage_root)
    storage_backend: str = "memory"
    storage_root: str = "/var/portfolio/storage"
    seed_sample_data: bool = False

    # Workflow engine
    execution_log_limit: int = 10

    # Notifications: "log" (log-only) or "webhook" (chat incoming-webhook POST)
    notification_backend: str = "log"
    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = 10.0

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Request / identity headers. Permission checks are handled upstream.
    actor_header_name: str = "X-User-ID"
    request_id_header: str = "X-Request-ID"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate storage and notification backends.

        - local storage: STORAGE_ROOT required.
        - webhook notifications: NOTIFICATION_WEBHOOK_URL required.
        """
        if self.storage_backend == "local":
            if not self.storage_root:
                raise ValueError(
                    "STORAGE_ROOT is required when storage_backend is 'local'."
                )
        elif self.storage_backend != "memory":
            raise ValueError(
                f"storage_backend must be 'memory' or 'local', got: {self.storage_backend!r}"
            )
        if self.notification_backend == "webhook":
            if not self.notification_webhook_url:
                raise ValueError(
                    "NOTIFICATION_WEBHOOK_URL is required when notification_backend is 'webhook'."
                )
        elif self.notification_backend != "log":
            raise ValueError(
                f"notification_backend must be 'log' or 'webhook', got: {self.notification_backend!r}"
            )
        if self.execution_log_limit < 1:
            raise ValueError("execution_log_limit must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
