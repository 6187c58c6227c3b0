from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Bike Shop Operations"
    app_env: str = "development"  # development, testing, production
    debug: bool = False

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Shutdown
    shutdown_grace_period: int = 30

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Slack (incoming webhook)
    slack_webhook_url: str | None = None
    slack_notifications_enabled: bool = False
    slack_channel_override: str | None = None
    slack_username: str = "Rice Bikes Bot"

    # Notification delivery
    notification_retry_attempts: int = Field(default=3, ge=1, le=10)
    notification_retry_backoff_seconds: float = Field(default=1.0, ge=0)
    notification_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcard origins since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("slack_webhook_url")
    @classmethod
    def validate_slack_webhook_url(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
            if not v.startswith("https://"):
                raise ValueError("SLACK_WEBHOOK_URL must be an https:// URL")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
