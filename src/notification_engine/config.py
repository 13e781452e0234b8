"""Service settings, loaded once at the composition root and passed down."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationSettings(BaseSettings):
    """
    All tunables of the notification engine.

    Values come from keyword arguments, ``NOTIFY_*`` environment variables or
    an optional ``.env`` file, in that order of precedence. Components never
    read the environment themselves; they receive what they need from an
    instance of this class.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    database_url: str = "sqlite+aiosqlite:///notifications.db"
    database_echo: bool = False
    seed_defaults: bool = True

    # Email (SMTP)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_from_email: str = ""
    smtp_use_tls: bool = True
    smtp_timeout: float = 10.0

    # Team chat (Slack Web API)
    slack_token: str = ""
    slack_default_channel: str = "#general"
    slack_api_url: str = "https://slack.com/api"
    slack_timeout: float = 10.0

    # In-app inbox
    inbox_max_per_recipient: int = Field(default=1000, gt=0)

    # Scheduling loop
    scheduler_interval_seconds: float = Field(default=60.0, gt=0)
    scheduler_shutdown_grace_seconds: float = Field(default=30.0, ge=0)

    # Listing
    default_page_size: int = Field(default=10, gt=0)
    max_page_size: int = Field(default=100, gt=0)

    log_level: str = "INFO"

    @property
    def email_from(self) -> str:
        """Sender address; falls back to the SMTP username like most providers."""
        return self.smtp_from_email or self.smtp_username
