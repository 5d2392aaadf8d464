"""Approval parsing, resolution detection and lifecycle tracking."""

from approval_buttons.approvals.types import (
    APPROVAL_ACTIONS,
    ApprovalAction,
    ApprovalInfo,
    ApprovalResolution,
    Channel,
    DeliveryHandle,
    PendingEntry,
    SlackHandle,
    TelegramHandle,
)
from approval_buttons.approvals.parser import (
    detect_approval_result,
    format_approval_text,
    infer_action,
    parse_approval_text,
)
from approval_buttons.approvals.store import ApprovalStore

__all__ = [
    "APPROVAL_ACTIONS",
    "ApprovalAction",
    "ApprovalInfo",
    "ApprovalResolution",
    "Channel",
    "DeliveryHandle",
    "PendingEntry",
    "SlackHandle",
    "TelegramHandle",
    "detect_approval_result",
    "format_approval_text",
    "infer_action",
    "parse_approval_text",
    "ApprovalStore",
]
