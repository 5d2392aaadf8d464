"""Type definitions for exec approval tracking."""

from dataclasses import dataclass
from typing import ClassVar, Literal

# Chat platforms an approval can be delivered to
Channel = Literal["telegram", "slack"]

# Approval decisions
ApprovalAction = Literal["allow-once", "allow-always", "deny"]

APPROVAL_ACTIONS: tuple[ApprovalAction, ...] = ("allow-once", "allow-always", "deny")


@dataclass(frozen=True)
class ApprovalInfo:
    """Parsed representation of an exec approval request."""
    id: str
    command: str = "unknown"
    cwd: str = "unknown"
    host: str = "gateway"
    agent: str = "main"
    security: str = "allowlist"
    ask: str = "on-miss"
    expires: str = "120s"

    @property
    def short_id(self) -> str:
        return self.id[:8]


@dataclass(frozen=True)
class ApprovalResolution:
    """An approval id matched in outgoing text, plus the inferred decision."""
    id: str
    action: ApprovalAction


@dataclass(frozen=True)
class TelegramHandle:
    """Reference to a delivered Telegram message."""
    channel: ClassVar[Channel] = "telegram"
    chat_id: str
    message_id: int


@dataclass(frozen=True)
class SlackHandle:
    """Reference to a delivered Slack message."""
    channel: ClassVar[Channel] = "slack"
    channel_id: str
    ts: str


DeliveryHandle = TelegramHandle | SlackHandle


@dataclass(frozen=True)
class PendingEntry:
    """An approval that was delivered with buttons and awaits a decision."""
    channel: Channel
    handle: DeliveryHandle
    info: ApprovalInfo
    sent_at: int  # Unix ms
