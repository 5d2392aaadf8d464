"""Slack channel implementation using slack_sdk."""

import asyncio

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from approval_buttons.approvals.types import (
    ApprovalAction,
    ApprovalInfo,
    DeliveryHandle,
    SlackHandle,
)
from approval_buttons.channels.base import (
    REQUEST_TIMEOUT_SECONDS,
    ApprovalChannel,
    ChannelStatus,
)
from approval_buttons.channels.slack_ui import (
    format_slack_approval_expired,
    format_slack_approval_request,
    format_slack_approval_resolved,
    slack_fallback_text,
)

SLACK_ERRORS = (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError)


def _describe(error: Exception) -> str:
    if isinstance(error, SlackApiError):
        return str(error.response.get("error", error))
    return str(error) or type(error).__name__


class SlackChannel(ApprovalChannel):
    """
    Delivers approvals to a Slack channel or DM as Block Kit messages.

    For a DM, pass the user's ID as the channel; Slack opens the IM and
    reports its channel ID, which is what later updates are sent to.
    """

    name = "slack"

    def __init__(self, token: str, channel: str, client: AsyncWebClient | None = None):
        self.channel = channel
        self._client = client or AsyncWebClient(token=token, timeout=int(REQUEST_TIMEOUT_SECONDS))

    async def deliver_request(self, info: ApprovalInfo) -> SlackHandle | None:
        try:
            response = await self._client.chat_postMessage(
                channel=self.channel,
                text=slack_fallback_text(info),
                blocks=format_slack_approval_request(info),
            )
        except SLACK_ERRORS as e:
            logger.warning(f"Slack chat.postMessage failed: {_describe(e)}")
            return None

        ts = response.get("ts")
        if not ts:
            logger.warning("Slack chat.postMessage returned no ts")
            return None
        return SlackHandle(channel_id=response.get("channel") or self.channel, ts=ts)

    async def mark_resolved(
        self, handle: DeliveryHandle, info: ApprovalInfo, action: ApprovalAction
    ) -> bool:
        return await self.update_message(
            handle,
            f"Exec approval {action}: {info.command}",
            format_slack_approval_resolved(info, action),
        )

    async def mark_expired(self, handle: DeliveryHandle, info: ApprovalInfo) -> bool:
        return await self.update_message(
            handle,
            f"Exec approval expired: {info.command}",
            format_slack_approval_expired(info),
        )

    async def check(self) -> ChannelStatus:
        try:
            response = await self._client.auth_test()
        except SLACK_ERRORS as e:
            return ChannelStatus(reachable=False, error=_describe(e))
        return ChannelStatus(reachable=True, identity=response.get("team") or "unknown")

    # ── Web API wrappers ────────────────────────────────────────────

    async def update_message(self, handle: DeliveryHandle, text: str, blocks: list[dict]) -> bool:
        """Replace a message's text and blocks."""
        if not isinstance(handle, SlackHandle):
            logger.error(f"Slack cannot update a {handle.channel} message")
            return False
        try:
            await self._client.chat_update(
                channel=handle.channel_id,
                ts=handle.ts,
                text=text,
                blocks=blocks,
            )
        except SLACK_ERRORS as e:
            logger.warning(f"Slack chat.update failed for ts={handle.ts}: {_describe(e)}")
            return False
        return True
