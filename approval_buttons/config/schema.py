"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelegramConfig(BaseModel):
    """Telegram channel configuration."""
    enabled: bool = True
    token: str = ""  # Bot token from @BotFather
    chat_id: str | int = ""  # Chat that receives approval buttons
    allow_from: list[str | int] = Field(default_factory=list)  # First numeric entry doubles as chat_id


class SlackConfig(BaseModel):
    """Slack channel configuration."""
    enabled: bool = True
    token: str = ""  # Bot OAuth token (xoxb-...)
    channel: str = ""  # Channel ID, or a user ID to DM


class ApprovalsConfig(BaseModel):
    """Approval tracking configuration."""
    stale_mins: int = 10  # Pending approvals expire after this many minutes
    verbose: bool = False  # Debug-level diagnostics


class GatewayConfig(BaseModel):
    """HTTP hook server configuration."""
    host: str = "127.0.0.1"
    port: int = 18791


class Config(BaseSettings):
    """Root configuration for approval-buttons."""

    model_config = SettingsConfigDict(
        env_prefix="APPROVAL_BUTTONS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    approvals: ApprovalsConfig = Field(default_factory=ApprovalsConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
