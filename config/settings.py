"""Configuration settings for the group guard bot."""
from typing import Optional

from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # 1. Telegram
    BOT_TOKEN: SecretStr = Field(..., description="Telegram bot token")

    # 2. Moderation
    COMMAND_PREFIX: str = Field(
        default="!",
        description="Character that marks a group message as a command"
    )
    DEFAULT_PASSWORD_TIMEOUT_MINUTES: int = Field(
        default=2,
        description="Minutes a new member has to send the group password"
    )
    MAX_REPLY_LENGTH: int = Field(
        default=4800,
        description="Maximum length of a rendered list in a reply"
    )

    # 3. Database
    DATABASE_URL: str = Field(
        default="sqlite:///groupguard.db",
        description="Database connection URL"
    )

    # 4. Transport
    USE_WEBHOOK: bool = Field(
        default=False,
        description="Receive updates over a webhook instead of long polling"
    )
    WEBHOOK_URL: Optional[str] = Field(
        default=None,
        description="Public URL registered with Telegram"
    )
    WEBHOOK_PATH: str = Field(default="/webhook", description="Webhook route")
    WEBHOOK_HOST: str = Field(default="0.0.0.0", description="Listen address")
    WEBHOOK_PORT: int = Field(default=3000, description="Listen port")
    WEBHOOK_SECRET: Optional[SecretStr] = Field(
        default=None,
        description="Secret token Telegram echoes in every webhook request"
    )

    # 5. Logging
    LOG_LEVEL: str = Field(default="DEBUG", description="Console log level")
    LOG_FILE: str = Field(default="bot.log", description="Rotating log file")

    # Validators
    @field_validator('DEFAULT_PASSWORD_TIMEOUT_MINUTES', 'MAX_REPLY_LENGTH')
    def must_be_positive(cls, value):
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator('COMMAND_PREFIX')
    def single_character_prefix(cls, value):
        if len(value) != 1 or value.isspace():
            raise ValueError("must be a single non-space character")
        return value

    # Helpers
    def get_bot_token(self) -> str:
        """Return the bot token as a plain string."""
        return self.BOT_TOKEN.get_secret_value()

    def get_webhook_secret(self) -> Optional[str]:
        return self.WEBHOOK_SECRET.get_secret_value() if self.WEBHOOK_SECRET else None

    @property
    def database_path(self) -> str:
        """Filesystem path of the SQLite database taken from DATABASE_URL."""
        url = self.DATABASE_URL
        for prefix in ("sqlite+aiosqlite:///", "sqlite:///"):
            if url.startswith(prefix):
                return url[len(prefix):]
        return url

    @property
    def default_timeout_seconds(self) -> int:
        return self.DEFAULT_PASSWORD_TIMEOUT_MINUTES * 60
