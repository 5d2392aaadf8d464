"""Wires outgoing gateway messages to the parser, detector, store and channels."""

import asyncio
from dataclasses import dataclass
from typing import Callable, Mapping

from loguru import logger

from approval_buttons.approvals.parser import (
    detect_approval_result,
    is_approval_text,
    parse_approval_text,
)
from approval_buttons.approvals.store import ApprovalStore
from approval_buttons.approvals.types import ApprovalAction, PendingEntry
from approval_buttons.channels.base import ApprovalChannel


@dataclass(frozen=True)
class HookDecision:
    """What the host gateway should do with the original message."""
    cancel: bool = False


PASS = HookDecision(cancel=False)
SUPPRESS = HookDecision(cancel=True)


class ApprovalCoordinator:
    """
    Turns plain-text approval messages into button messages.

    For each message the host is about to send on a channel:
    1. If it confirms a decision on a pending approval, the delivered
       message is edited to show the result and the text passes through.
    2. If it is a new approval request, a button message is delivered and
       the original text is suppressed. On delivery failure the plain text
       passes through instead.

    Approvals left unanswered past the TTL are edited to show they expired.
    """

    def __init__(
        self,
        channels: Mapping[str, ApprovalChannel],
        stale_ttl_ms: int,
        clock: Callable[[], int] | None = None,
    ):
        self.channels = dict(channels)
        self.store = ApprovalStore(
            stale_ttl_ms,
            notify_expired=self._on_expired,
            clock=clock,
        )
        self._updates: set[asyncio.Task] = set()

    # ── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        self.store.start()

    def stop(self) -> None:
        """Stop the sweep. In-flight platform updates are left to finish on their own."""
        self.store.stop()

    async def drain(self) -> None:
        """Wait for scheduled expiry updates to finish."""
        while self._updates:
            await asyncio.gather(*list(self._updates), return_exceptions=True)

    async def close(self) -> None:
        self.stop()
        await self.drain()
        for channel in self.channels.values():
            await channel.close()

    # ── Message hook ────────────────────────────────────────────────

    async def handle_outgoing(self, text: str, channel_id: str) -> HookDecision:
        """Decide whether an outgoing message passes through or is replaced."""
        channel = self.channels.get(channel_id)
        if channel is None or not text:
            return PASS

        # A re-sent request carries its own ID; leave it to the duplicate guard.
        if not is_approval_text(text):
            resolution = detect_approval_result(text, self._entries_for(channel_id))
            if resolution:
                entry = self.store.resolve(resolution.id)
                if entry:
                    logger.info(f"Resolved {resolution.id[:8]}… → {resolution.action}")
                    await self._push_resolved(channel, entry, resolution.action)
                return PASS

        info = parse_approval_text(text)
        if info is None:
            return PASS

        # Reached only because marker text bypasses the detector above;
        # otherwise a re-sent request would resolve itself as allow-once.
        if self.store.has(info.id):
            logger.debug(f"Skipping duplicate {info.short_id}…")
            return SUPPRESS

        logger.info(f"Intercepting {info.short_id}… on {channel_id}")

        try:
            handle = await channel.deliver_request(info)
        except Exception as e:
            logger.warning(f"Delivery to {channel_id} raised for {info.short_id}…: {e}")
            handle = None

        if handle is None:
            logger.warning(f"Send failed for {info.short_id}…, falling back to plain text")
            return PASS

        self.store.add(info.id, handle, info)
        logger.info(f"Sent buttons for {info.short_id}… on {channel_id}")
        return SUPPRESS

    def _entries_for(self, channel_id: str) -> dict[str, PendingEntry]:
        return {
            approval_id: entry
            for approval_id, entry in self.store.entries().items()
            if entry.channel == channel_id
        }

    # ── Platform updates ────────────────────────────────────────────

    async def _push_resolved(
        self, channel: ApprovalChannel, entry: PendingEntry, action: ApprovalAction
    ) -> None:
        try:
            edited = await channel.mark_resolved(entry.handle, entry.info, action)
        except Exception as e:
            logger.warning(f"Updating {entry.channel} message for {entry.info.short_id}… raised: {e}")
            return
        if edited:
            logger.debug(f"Edited {entry.channel} message for {entry.info.short_id}…")

    def _on_expired(self, entry: PendingEntry) -> None:
        """Store callback: schedule the expiry edit without blocking the sweep."""
        channel = self.channels.get(entry.channel)
        if channel is None:
            logger.warning(f"No {entry.channel} channel to mark {entry.info.short_id}… expired")
            return
        task = asyncio.get_running_loop().create_task(self._push_expired(channel, entry))
        self._updates.add(task)
        task.add_done_callback(self._updates.discard)

    async def _push_expired(self, channel: ApprovalChannel, entry: PendingEntry) -> None:
        try:
            edited = await channel.mark_expired(entry.handle, entry.info)
        except Exception as e:
            logger.warning(f"Marking {entry.info.short_id}… expired raised: {e}")
            return
        if edited:
            logger.debug(f"Marked {entry.info.short_id}… expired on {entry.channel}")
