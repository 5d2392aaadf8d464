"""Chat platforms that render approvals as button messages."""

from approval_buttons.channels.base import ApprovalChannel, ChannelStatus
from approval_buttons.channels.slack import SlackChannel
from approval_buttons.channels.telegram import TelegramChannel

__all__ = ["ApprovalChannel", "ChannelStatus", "SlackChannel", "TelegramChannel"]
