"""Configuration management with Pydantic Settings.

Loads the webhook endpoint and message defaults from environment variables
(or a ``.env`` file) so a client can be built without hard-coded secrets.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlackSettings(BaseSettings):
    """Slack webhook settings."""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    webhook_url: SecretStr | None = Field(
        default=None,
        alias="SLACK_WEBHOOK_URL",
        description="Incoming webhook URL",
    )
    channel: str | None = Field(
        default=None,
        alias="SLACK_CHANNEL",
        description="Default channel for messages",
    )
    username: str | None = Field(
        default=None,
        alias="SLACK_USERNAME",
        description="Default username messages are posted as",
    )
    icon: str | None = Field(
        default=None,
        alias="SLACK_ICON",
        description="Default icon, an emoji code or an image URL",
    )
    as_user: bool = Field(default=False, alias="SLACK_AS_USER")
    link_names: bool = Field(default=False, alias="SLACK_LINK_NAMES")
    unfurl_links: bool = Field(default=False, alias="SLACK_UNFURL_LINKS")
    unfurl_media: bool = Field(default=True, alias="SLACK_UNFURL_MEDIA")
    allow_markdown: bool = Field(default=True, alias="SLACK_ALLOW_MARKDOWN")
    markdown_in_attachments: list[str] = Field(
        default_factory=list,
        alias="SLACK_MARKDOWN_IN_ATTACHMENTS",
        description="Attachment fields rendered as markdown (JSON list)",
    )
    timeout: float = Field(
        default=10.0,
        alias="SLACK_TIMEOUT",
        description="HTTP request timeout in seconds",
        gt=0,
    )

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: SecretStr | None) -> SecretStr | None:
        """Validate webhook URL format."""
        if v is None:
            return v
        if not v.get_secret_value().startswith(("http://", "https://")):
            raise ValueError("SLACK_WEBHOOK_URL must be an HTTP(S) URL")
        return v

    @property
    def enabled(self) -> bool:
        """Check if a webhook is configured."""
        return self.webhook_url is not None

    def client_options(self) -> dict[str, Any]:
        """Get the client options mapping for these settings."""
        return {
            "channel": self.channel,
            "username": self.username,
            "as_user": self.as_user,
            "icon": self.icon,
            "link_names": self.link_names,
            "unfurl_links": self.unfurl_links,
            "unfurl_media": self.unfurl_media,
            "allow_markdown": self.allow_markdown,
            "markdown_in_attachments": list(self.markdown_in_attachments),
        }


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from slack_notifier.config import get_settings

        settings = get_settings()
        print(settings.slack.channel)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    slack: SlackSettings = Field(default_factory=SlackSettings)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Print payloads instead of posting them",
    )

    def redacted_summary(self) -> dict[str, str]:
        """Get a summary of settings with the webhook secret masked."""
        webhook_url = self.slack.webhook_url
        return {
            "webhook_url": (
                self._redact_webhook(webhook_url.get_secret_value())
                if webhook_url
                else "(not set)"
            ),
            "channel": self.slack.channel or "(not set)",
            "username": self.slack.username or "(not set)",
            "icon": self.slack.icon or "(not set)",
            "log_level": self.log_level,
            "dry_run": str(self.dry_run),
        }

    @staticmethod
    def _redact_webhook(url: str) -> str:
        """Keep the scheme and host of a webhook URL, masking the path."""
        if "://" not in url:
            return "***"
        protocol_end = url.index("://") + 3
        slash_pos = url.find("/", protocol_end)
        if slash_pos == -1:
            return url
        return f"{url[:slash_pos]}/***"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
