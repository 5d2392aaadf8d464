"""Self-diagnostics: config resolution, connectivity checks and status reporting."""

import os
import re
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from loguru import logger

from approval_buttons.approvals.store import ApprovalStore
from approval_buttons.channels.base import ApprovalChannel, ChannelStatus
from approval_buttons.config.schema import Config

DEFAULT_STALE_MINS = 10

NUMERIC_CHAT_ID = re.compile(r"^-?\d+$")


# ── Config resolution ───────────────────────────────────────────────


@dataclass
class TelegramTarget:
    token: str
    chat_id: str


@dataclass
class SlackTarget:
    token: str
    channel: str


@dataclass
class ResolvedConfig:
    """Validated configuration with defaults applied."""
    telegram: TelegramTarget | None = None
    slack: SlackTarget | None = None
    stale_mins: int = DEFAULT_STALE_MINS
    verbose: bool = False

    @property
    def stale_ttl_ms(self) -> int:
        return self.stale_mins * 60_000


def _resolve_telegram(config: Config, env: Mapping[str, str]) -> TelegramTarget | None:
    tg = config.telegram
    if not tg.enabled:
        return None

    token = tg.token or env.get("TELEGRAM_BOT_TOKEN", "")
    chat_id = str(tg.chat_id or env.get("TELEGRAM_CHAT_ID", ""))

    # Auto-repair: fall back to the first allow_from entry if it is a chat ID
    if not chat_id and tg.allow_from:
        candidate = str(tg.allow_from[0])
        if NUMERIC_CHAT_ID.match(candidate):
            chat_id = candidate
            logger.info(f"Auto-resolved Telegram chat_id from telegram.allow_from: {chat_id}")

    if not token and not chat_id:
        return None
    if not token:
        logger.warning(
            "No Telegram bot token found. Check: telegram.token → TELEGRAM_BOT_TOKEN env"
        )
        return None
    if not chat_id:
        logger.warning(
            "No Telegram chat_id found. Set telegram.chatId, TELEGRAM_CHAT_ID env, "
            "or telegram.allowFrom"
        )
        return None
    return TelegramTarget(token=token, chat_id=chat_id)


def _resolve_slack(config: Config, env: Mapping[str, str]) -> SlackTarget | None:
    sl = config.slack
    if not sl.enabled:
        return None

    token = sl.token or env.get("SLACK_BOT_TOKEN", "")
    channel = sl.channel or env.get("SLACK_CHANNEL_ID", "")

    if not token and not channel:
        return None
    if not token:
        logger.warning("No Slack bot token found. Check: slack.token → SLACK_BOT_TOKEN env")
        return None
    if not channel:
        logger.warning("No Slack channel found. Set slack.channel or SLACK_CHANNEL_ID env")
        return None
    return SlackTarget(token=token, channel=channel)


def resolve_config(config: Config, env: Mapping[str, str] | None = None) -> ResolvedConfig | None:
    """
    Resolve per-channel credentials from the config file and environment.

    Priority: explicit config, then environment variables. A channel is
    enabled only when both of its credentials resolve.

    Returns:
        The resolved config, or None if no channel could be configured.
    """
    env = os.environ if env is None else env

    telegram = _resolve_telegram(config, env)
    slack = _resolve_slack(config, env)

    if telegram is None and slack is None:
        logger.error("Approval buttons disabled: no Telegram or Slack channel configured")
        return None

    stale_mins = config.approvals.stale_mins
    if stale_mins <= 0:
        stale_mins = DEFAULT_STALE_MINS

    return ResolvedConfig(
        telegram=telegram,
        slack=slack,
        stale_mins=stale_mins,
        verbose=config.approvals.verbose,
    )


def _mask(value: str, head: int, tail: int) -> str:
    if len(value) <= head + tail:
        return "…"
    return f"{value[:head]}…{value[-tail:]}"


def log_startup_diagnostics(resolved: ResolvedConfig) -> None:
    """Log a masked summary of the resolved config."""
    if resolved.telegram:
        logger.info(
            f"Telegram config OK → chat_id={_mask(resolved.telegram.chat_id, 3, 2)}, "
            f"token={_mask(resolved.telegram.token, 6, 4)}"
        )
    if resolved.slack:
        logger.info(
            f"Slack config OK → channel={resolved.slack.channel}, "
            f"token={_mask(resolved.slack.token, 6, 4)}"
        )
    logger.info(f"stale_mins={resolved.stale_mins}, verbose={resolved.verbose}")


async def run_startup_checks(channels: Mapping[str, ApprovalChannel]) -> None:
    """Check connectivity of each channel and log the result."""
    for name, channel in channels.items():
        status = await channel.check()
        if status.reachable:
            logger.info(f"{name} connected → {status.identity}")
        else:
            logger.warning(
                f"{name} unreachable: {status.error}. Will still attempt to send messages."
            )


# ── Health check ────────────────────────────────────────────────────


@dataclass
class ConfigFlags:
    telegram_chat_id: bool = False
    telegram_token: bool = False
    slack_token: bool = False
    slack_channel: bool = False


@dataclass
class HealthCheck:
    """Snapshot of plugin health. Building one never changes store state."""
    ok: bool = False
    config: ConfigFlags = field(default_factory=ConfigFlags)
    telegram: ChannelStatus = field(default_factory=ChannelStatus)
    slack: ChannelStatus = field(default_factory=ChannelStatus)
    pending: int = 0
    total_processed: int = 0
    uptime_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HealthCheck":
        return cls(
            ok=bool(data.get("ok", False)),
            config=ConfigFlags(**data.get("config", {})),
            telegram=ChannelStatus(**data.get("telegram", {})),
            slack=ChannelStatus(**data.get("slack", {})),
            pending=data.get("pending", 0),
            total_processed=data.get("total_processed", 0),
            uptime_ms=data.get("uptime_ms", 0),
        )


async def run_health_check(
    resolved: ResolvedConfig | None,
    channels: Mapping[str, ApprovalChannel],
    store: ApprovalStore,
    started_at: float,
) -> HealthCheck:
    """
    Run config validation, connectivity checks and collect store stats.

    Args:
        resolved: Resolved config, or None if the plugin is disabled.
        channels: Configured channels by name.
        store: The live approval store.
        started_at: Process start time (``time.time()``).
    """
    health = HealthCheck(
        config=ConfigFlags(
            telegram_chat_id=bool(resolved and resolved.telegram and resolved.telegram.chat_id),
            telegram_token=bool(resolved and resolved.telegram and resolved.telegram.token),
            slack_token=bool(resolved and resolved.slack and resolved.slack.token),
            slack_channel=bool(resolved and resolved.slack and resolved.slack.channel),
        ),
        pending=store.pending_count,
        total_processed=store.processed_count,
        uptime_ms=int((time.time() - started_at) * 1000),
    )

    for name in ("telegram", "slack"):
        channel = channels.get(name)
        if channel is None:
            status = ChannelStatus(error="not configured")
        else:
            status = await channel.check()
        setattr(health, name, status)

    health.ok = health.telegram.reachable or health.slack.reachable
    return health


def format_health_check(health: HealthCheck) -> str:
    """Format a health check as plain text."""
    def mark(flag: bool) -> str:
        return "✓" if flag else "✗"

    lines = [
        f"{'🟢' if health.ok else '🔴'} Approval Buttons Status",
        "",
    ]

    flags = health.config
    if flags.telegram_chat_id and flags.telegram_token:
        lines.append(
            f"Telegram: chatId={mark(flags.telegram_chat_id)} · token={mark(flags.telegram_token)}"
        )
        if health.telegram.reachable:
            lines.append(f"  ✓ connected ({health.telegram.identity or '?'})")
        else:
            lines.append(f"  ✗ {health.telegram.error or 'unreachable'}")
    else:
        lines.append("Telegram: not configured")

    if flags.slack_token and flags.slack_channel:
        lines.append(
            f"Slack: token={mark(flags.slack_token)} · channel={mark(flags.slack_channel)}"
        )
        if health.slack.reachable:
            lines.append(f"  ✓ connected ({health.slack.identity or '?'})")
        else:
            lines.append(f"  ✗ {health.slack.error or 'unreachable'}")
    else:
        lines.append("Slack: not configured")

    lines.extend([
        "",
        f"Pending: {health.pending} · Processed: {health.total_processed}",
        f"Uptime: {health.uptime_ms // 60_000}m",
    ])
    return "\n".join(lines)
