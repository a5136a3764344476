from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    service_name: str = Field("challenges-svc", alias="SERVICE_NAME")
    database_url: str = Field("sqlite+aiosqlite:///./challenges.db", alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Nearby offers
    default_radius_meters: int = Field(2000, alias="DEFAULT_RADIUS_METERS")
    # Off by default: every active offer is returned, nearest first.
    enforce_radius: bool = Field(default=False, alias="ENFORCE_RADIUS")

    # Redemption codes
    qr_code_bytes: int = Field(default=12, alias="QR_CODE_BYTES")

    # Redis (rate limit on merchant scans)
    redis_url: str = Field("redis://127.0.0.1:6379/0", alias="REDIS_URL")
    rl_enabled: bool = Field(default=False, alias="RL_ENABLED")
    rl_window_seconds: int = Field(default=60, alias="RL_WINDOW_SECONDS")
    rl_max_reqs: int = Field(default=30, alias="RL_MAX_REQS")

    # NATS
    nats_urls: str = Field("nats://127.0.0.1:4222", alias="NATS_URLS")
    nats_events_enabled: bool = Field(default=False, alias="NATS_EVENTS_ENABLED")
    nats_subject_reported: str = Field("challenges.reported", alias="NATS_SUBJECT_REPORTED")
    nats_subject_validated: str = Field("challenges.validated", alias="NATS_SUBJECT_VALIDATED")

    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    cors_origins: str = Field(
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ORIGINS",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
