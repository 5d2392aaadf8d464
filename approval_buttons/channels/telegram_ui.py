"""Telegram HTML builders for approval messages."""

from approval_buttons.approvals.types import ApprovalAction, ApprovalInfo

ACTION_ICONS: dict[ApprovalAction, str] = {
    "allow-once": "✅",
    "allow-always": "🔏",
    "deny": "❌",
}

ACTION_LABELS: dict[ApprovalAction, str] = {
    "allow-once": "Allowed (once)",
    "allow-always": "Always allowed",
    "deny": "Denied",
}


def escape_html(text: str) -> str:
    """Escape text for Telegram's HTML parse mode."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_approval_request(info: ApprovalInfo) -> str:
    """Format a pending approval request."""
    e = escape_html
    return "\n".join([
        "🔐 <b>Exec Approval Request</b>",
        "",
        f"🤖 Agent: <b>{e(info.agent)}</b>",
        f"📁 CWD: <code>{e(info.cwd)}</code>",
        "",
        f"<pre>{e(info.command)}</pre>",
        "",
        f"⏱️ Expires: {e(info.expires)}",
        f"🆔 <code>{e(info.id)}</code>",
    ])


def format_approval_resolved(info: ApprovalInfo, action: ApprovalAction) -> str:
    """Format an approval after a decision. Sent without a keyboard."""
    e = escape_html
    icon = ACTION_ICONS.get(action, "✅")
    label = ACTION_LABELS.get(action, action)
    return "\n".join([
        f"{icon} <b>Exec {label}</b>",
        "",
        f"🤖 Agent: <b>{e(info.agent)}</b>",
        f"📁 CWD: <code>{e(info.cwd)}</code>",
        "",
        f"<pre>{e(info.command)}</pre>",
        "",
        f"🆔 <code>{e(info.id)}</code>",
    ])


def format_approval_expired(info: ApprovalInfo) -> str:
    """Format an approval that timed out without a decision."""
    e = escape_html
    return "\n".join([
        "⏰ <b>Exec Approval Expired</b>",
        "",
        f"🤖 Agent: <b>{e(info.agent)}</b>",
        "",
        f"<pre>{e(info.command)}</pre>",
        "",
        f"🆔 <code>{e(info.id)}</code>",
    ])


def build_approval_keyboard(approval_id: str) -> list[list[dict[str, str]]]:
    """
    Build inline keyboard rows for an approval request.

    Each button's callback data is the ``/approve <id> <action>`` command.
    The host gateway turns unknown callback data into a synthetic text
    message, so a tap is processed like a typed command.
    """
    return [
        [
            {"text": "✅ Allow Once", "callback_data": f"/approve {approval_id} allow-once"},
            {"text": "🔏 Always", "callback_data": f"/approve {approval_id} allow-always"},
        ],
        [
            {"text": "❌ Deny", "callback_data": f"/approve {approval_id} deny"},
        ],
    ]
