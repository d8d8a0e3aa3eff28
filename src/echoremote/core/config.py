"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class AccountConfig(BaseSettings):
    """Cloud account transport configuration."""

    model_config = {"env_prefix": "ECHOREMOTE_ACCOUNT_"}

    base_url: str = "https://alexa.amazon.com"
    cookie: str = ""
    csrf: str | None = None
    user_agent: str = "Mozilla/5.0 (echoremote)"
    timeout_seconds: int = 30
    max_retries: int = 1
    retry_backoff_seconds: float = 0.5


class NotificationConfig(BaseSettings):
    """Notification cache configuration."""

    model_config = {"env_prefix": "ECHOREMOTE_NOTIFICATION_"}

    defaults_path: str | None = None
    refresh_on_start: bool = True


class ListConfig(BaseSettings):
    """To-do and shopping list configuration."""

    model_config = {"env_prefix": "ECHOREMOTE_LIST_"}

    default_size: int = 100


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "ECHOREMOTE_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    account: AccountConfig = Field(default_factory=AccountConfig)
    notification: NotificationConfig = Field(default_factory=NotificationConfig)
    lists: ListConfig = Field(default_factory=ListConfig)
