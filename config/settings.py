"""Application settings loaded from environment variables.

Uses pydantic-settings for validation and type coercion. App-specific
settings use the ``NAGARSEVA_`` prefix; GCP / infrastructure settings use
their canonical environment variable names via ``validation_alias``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Central configuration for the NagarSeva citizen services bot.

    Environment variables are loaded from a ``.env`` file when present.
    App-specific keys are prefixed with ``NAGARSEVA_``; GCP / infra keys
    use their standard names (configured via ``validation_alias``).
    """

    model_config = SettingsConfigDict(
        env_prefix="NAGARSEVA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ── App ────────────────────────────────────────────────────────────
    env: Literal["development", "production"] = "development"
    corporation_name: str = "Vadodara Municipal Corporation"

    # ── GCP ────────────────────────────────────────────────────────────
    gcp_project_id: str = Field(default="", validation_alias="GCP_PROJECT_ID")
    gcp_region: str = Field(default="asia-south1", validation_alias="GCP_REGION")

    # ── Vertex AI / Gemini ─────────────────────────────────────────────
    vertex_ai_model: str = Field(default="gemini-2.5-flash", validation_alias="VERTEX_AI_MODEL")
    vertex_ai_location: str = Field(default="asia-south1", validation_alias="VERTEX_AI_LOCATION")
    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    # ── Record store ───────────────────────────────────────────────────
    # "memory" keeps records in-process (demo mode); "redis" uses REDIS_URL.
    store_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    seed_demo_data: bool = True

    # ── API ────────────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")
    cors_origins: str = Field(default="", validation_alias="CORS_ORIGINS")

    # ── Rate Limiting ──────────────────────────────────────────────────
    rate_limit_per_minute: int = Field(default=60, validation_alias="RATE_LIMIT_PER_MINUTE")
    trusted_proxy_count: int = Field(
        default=1,
        ge=0,
        validation_alias="TRUSTED_PROXY_COUNT",
    )

    # ── Admin API Key ──────────────────────────────────────────────────
    admin_api_key: str = Field(default="", validation_alias="ADMIN_API_KEY")

    # ── Logging ────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # ── Conversation ───────────────────────────────────────────────────
    history_window: int = Field(default=10, ge=1)
    session_ttl_seconds: int = Field(default=3_600, ge=60)  # 1 hour
    demo_citizen_id: str = "00000000-0000-0000-0000-000000000000"

    # ── Notifications ──────────────────────────────────────────────────
    notification_poll_interval_seconds: float = Field(default=30.0, gt=0)
    enable_notification_poller: bool = True

    # ── Service levels ─────────────────────────────────────────────────
    grievance_sla_days: int = 3
    application_sla_days: int = 7
    payment_gateway_url: str = "https://pay.gov.in/citizen"

    # ── Derived Properties ─────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION

    @property
    def llm_enabled(self) -> bool:
        return bool(self.gcp_project_id)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Module-level singleton: import ``settings`` everywhere.
settings = Settings()
