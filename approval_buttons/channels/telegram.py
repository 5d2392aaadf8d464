"""Telegram channel implementation using python-telegram-bot."""

from loguru import logger
from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import TelegramError
from telegram.request import HTTPXRequest

from approval_buttons.approvals.types import (
    ApprovalAction,
    ApprovalInfo,
    DeliveryHandle,
    TelegramHandle,
)
from approval_buttons.channels.base import (
    REQUEST_TIMEOUT_SECONDS,
    ApprovalChannel,
    ChannelStatus,
)
from approval_buttons.channels.telegram_ui import (
    build_approval_keyboard,
    format_approval_expired,
    format_approval_request,
    format_approval_resolved,
)


def _build_bot(token: str) -> Bot:
    request = HTTPXRequest(
        connect_timeout=REQUEST_TIMEOUT_SECONDS,
        read_timeout=REQUEST_TIMEOUT_SECONDS,
        write_timeout=REQUEST_TIMEOUT_SECONDS,
    )
    return Bot(token=token, request=request)


def _to_markup(rows: list[list[dict[str, str]]]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(text=b["text"], callback_data=b["callback_data"]) for b in row]
        for row in rows
    ])


class TelegramChannel(ApprovalChannel):
    """
    Delivers approvals to a single Telegram chat as HTML with an inline keyboard.

    Button taps reach the host gateway as ``/approve`` commands; the
    resulting confirmation text is what resolves the pending entry here.
    """

    name = "telegram"

    def __init__(self, token: str, chat_id: str, bot: Bot | None = None):
        self.chat_id = chat_id
        self._bot = bot or _build_bot(token)

    async def deliver_request(self, info: ApprovalInfo) -> TelegramHandle | None:
        message_id = await self.send_message(
            format_approval_request(info),
            _to_markup(build_approval_keyboard(info.id)),
        )
        if message_id is None:
            return None
        return TelegramHandle(chat_id=self.chat_id, message_id=message_id)

    async def mark_resolved(
        self, handle: DeliveryHandle, info: ApprovalInfo, action: ApprovalAction
    ) -> bool:
        return await self.edit_message(handle, format_approval_resolved(info, action))

    async def mark_expired(self, handle: DeliveryHandle, info: ApprovalInfo) -> bool:
        return await self.edit_message(handle, format_approval_expired(info))

    async def check(self) -> ChannelStatus:
        try:
            me = await self._bot.get_me()
        except TelegramError as e:
            return ChannelStatus(reachable=False, error=str(e))
        if not me.username:
            return ChannelStatus(reachable=False, error="getMe returned no username")
        return ChannelStatus(reachable=True, identity=f"@{me.username}")

    async def close(self) -> None:
        try:
            await self._bot.shutdown()
        except TelegramError as e:
            logger.warning(f"Error shutting down Telegram bot: {e}")

    # ── Bot API wrappers ────────────────────────────────────────────

    async def send_message(
        self, text: str, reply_markup: InlineKeyboardMarkup | None = None
    ) -> int | None:
        """Send an HTML message. Returns the message_id, or None on failure."""
        try:
            message = await self._bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode="HTML",
                reply_markup=reply_markup,
            )
        except TelegramError as e:
            logger.warning(f"Telegram sendMessage failed: {e}")
            return None
        return message.message_id

    async def edit_message(self, handle: DeliveryHandle, text: str) -> bool:
        """Replace a message's text. Omitting reply_markup removes the buttons."""
        if not isinstance(handle, TelegramHandle):
            logger.error(f"Telegram cannot edit a {handle.channel} message")
            return False
        try:
            await self._bot.edit_message_text(
                text=text,
                chat_id=handle.chat_id,
                message_id=handle.message_id,
                parse_mode="HTML",
            )
        except TelegramError as e:
            logger.warning(f"Telegram editMessageText failed for msg={handle.message_id}: {e}")
            return False
        return True

    async def answer_callback(self, callback_query_id: str, text: str | None = None) -> bool:
        """Acknowledge a button press; text shows as a toast."""
        try:
            return await self._bot.answer_callback_query(callback_query_id, text=text)
        except TelegramError as e:
            logger.warning(f"Telegram answerCallbackQuery failed: {e}")
            return False

    async def delete_message(self, handle: TelegramHandle) -> bool:
        try:
            return await self._bot.delete_message(
                chat_id=handle.chat_id, message_id=handle.message_id
            )
        except TelegramError as e:
            logger.warning(f"Telegram deleteMessage failed for msg={handle.message_id}: {e}")
            return False
