"""Base interface for chat platforms that carry approval buttons."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from approval_buttons.approvals.types import (
    ApprovalAction,
    ApprovalInfo,
    Channel,
    DeliveryHandle,
)

# Per-request budget for chat platform API calls; failures are not retried.
REQUEST_TIMEOUT_SECONDS = 10.0


@dataclass
class ChannelStatus:
    """Reachability of a chat platform."""
    reachable: bool = False
    identity: str | None = None  # bot username or workspace name
    error: str | None = None


class ApprovalChannel(ABC):
    """
    A chat platform that renders approvals as button messages.

    Implementations never raise for platform failures: delivery returns
    None and updates return False so callers can fall back to plain text.
    """

    name: Channel

    @abstractmethod
    async def deliver_request(self, info: ApprovalInfo) -> DeliveryHandle | None:
        """Send the approval request with buttons. Returns a handle, or None on failure."""

    @abstractmethod
    async def mark_resolved(
        self, handle: DeliveryHandle, info: ApprovalInfo, action: ApprovalAction
    ) -> bool:
        """Replace the delivered message with the decision and drop the buttons."""

    @abstractmethod
    async def mark_expired(self, handle: DeliveryHandle, info: ApprovalInfo) -> bool:
        """Replace the delivered message with an expiry notice and drop the buttons."""

    @abstractmethod
    async def check(self) -> ChannelStatus:
        """Verify credentials and connectivity."""

    async def close(self) -> None:
        """Release network resources."""
