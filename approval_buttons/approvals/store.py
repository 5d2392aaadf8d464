"""In-memory store for pending approvals with TTL-based expiry."""

import asyncio
import time
from types import MappingProxyType
from typing import Callable, Mapping

from loguru import logger

from approval_buttons.approvals.types import ApprovalInfo, DeliveryHandle, PendingEntry

# Sweeps run every TTL/2, but never more often than this.
MIN_SWEEP_INTERVAL_MS = 30_000


def _now_ms() -> int:
    return int(time.time() * 1000)


class ApprovalStore:
    """
    Tracks approvals that were delivered with buttons.

    Handles:
    - Pending entries keyed by approval ID
    - Resolution and the processed counter
    - Periodic sweep of entries older than the TTL

    State lives in memory only; approvals do not survive a restart.
    """

    def __init__(
        self,
        stale_ttl_ms: int,
        notify_expired: Callable[[PendingEntry], None] | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize the store.

        Args:
            stale_ttl_ms: Age in milliseconds after which a pending entry expires.
            notify_expired: Called with each entry removed by the sweep.
            clock: Returns the current time in Unix milliseconds.
        """
        self.stale_ttl_ms = stale_ttl_ms
        self._notify_expired = notify_expired
        self._clock = clock or _now_ms
        self._pending: dict[str, PendingEntry] = {}
        self._total_processed = 0
        self._sweep_task: asyncio.Task | None = None

    # ── Lifecycle ───────────────────────────────────────────────────

    @property
    def sweep_interval(self) -> float:
        """Seconds between sweeps."""
        return max(self.stale_ttl_ms / 2, MIN_SWEEP_INTERVAL_MS) / 1000

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None

    def start(self) -> None:
        """Start the periodic sweep. Must be called from a running event loop."""
        if self._sweep_task is not None:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
        logger.debug(f"Approval sweep started (every {self.sweep_interval:.0f}s)")

    def stop(self) -> None:
        """Stop the periodic sweep. Safe to call when not started."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        self._sweep_task = None
        logger.debug("Approval sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.sweep_interval)
                self.clean_stale()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in approval sweep: {e}")

    # ── Core operations ─────────────────────────────────────────────

    def add(self, approval_id: str, handle: DeliveryHandle, info: ApprovalInfo) -> PendingEntry:
        """Track a delivered approval. An existing entry with the same ID is replaced."""
        entry = PendingEntry(
            channel=handle.channel,
            handle=handle,
            info=info,
            sent_at=self._clock(),
        )
        self._pending[approval_id] = entry
        return entry

    def has(self, approval_id: str) -> bool:
        return approval_id in self._pending

    def get(self, approval_id: str) -> PendingEntry | None:
        return self._pending.get(approval_id)

    def resolve(self, approval_id: str) -> PendingEntry | None:
        """Remove a pending approval and count it as processed."""
        entry = self._pending.pop(approval_id, None)
        if entry is not None:
            self._total_processed += 1
        return entry

    def entries(self) -> Mapping[str, PendingEntry]:
        """Read-only live view of pending approvals."""
        return MappingProxyType(self._pending)

    # ── Stats ───────────────────────────────────────────────────────

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def processed_count(self) -> int:
        return self._total_processed

    # ── Expiry ──────────────────────────────────────────────────────

    def clean_stale(self) -> int:
        """
        Remove entries older than the TTL.

        Each removed entry is passed to the expiry callback. A failing
        callback is logged and does not stop the sweep; the entry stays removed.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        stale = [
            (approval_id, entry)
            for approval_id, entry in self._pending.items()
            if now - entry.sent_at > self.stale_ttl_ms
        ]

        for approval_id, entry in stale:
            del self._pending[approval_id]
            logger.debug(
                f"Purged stale approval {approval_id[:8]}… "
                f"(age={(now - entry.sent_at) // 1000}s)"
            )
            if self._notify_expired:
                try:
                    self._notify_expired(entry)
                except Exception as e:
                    logger.error(f"Expiry callback failed for {approval_id[:8]}…: {e}")

        if stale:
            logger.info(f"Cleaned {len(stale)} stale approvals")

        return len(stale)
