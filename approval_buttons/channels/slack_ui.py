"""Slack Block Kit builders for approval messages."""

from approval_buttons.approvals.types import ApprovalAction, ApprovalInfo

ACTION_ICONS: dict[ApprovalAction, str] = {
    "allow-once": ":white_check_mark:",
    "allow-always": ":lock:",
    "deny": ":x:",
}

ACTION_LABELS: dict[ApprovalAction, str] = {
    "allow-once": "Allowed (once)",
    "allow-always": "Always allowed",
    "deny": "Denied",
}


def _header(text: str) -> dict:
    return {
        "type": "header",
        "text": {"type": "plain_text", "text": text, "emoji": True},
    }


def _command_section(command: str) -> dict:
    return {
        "type": "section",
        "text": {"type": "mrkdwn", "text": f"*Command:*\n```{command}```"},
    }


def format_slack_approval_request(info: ApprovalInfo) -> list[dict]:
    """Build blocks for a pending approval request, buttons included.

    Args:
        info: Parsed approval request

    Returns:
        List of Slack block kit blocks
    """
    return [
        _header("Exec Approval Request"),
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Agent:*\n{info.agent}"},
                {"type": "mrkdwn", "text": f"*CWD:*\n`{info.cwd}`"},
                {"type": "mrkdwn", "text": f"*Expires:*\n{info.expires}"},
            ],
        },
        _command_section(info.command),
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"ID: `{info.id}`"}],
        },
        {"type": "divider"},
        build_slack_approval_actions(info.id),
    ]


def build_slack_approval_actions(approval_id: str) -> dict:
    """Build the actions block; button values carry the /approve command."""
    return {
        "type": "actions",
        "block_id": f"approval_{approval_id}",
        "elements": [
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Allow Once", "emoji": True},
                "style": "primary",
                "action_id": "approval_allow_once",
                "value": f"/approve {approval_id} allow-once",
            },
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Always Allow", "emoji": True},
                "action_id": "approval_allow_always",
                "value": f"/approve {approval_id} allow-always",
            },
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Deny", "emoji": True},
                "style": "danger",
                "action_id": "approval_deny",
                "value": f"/approve {approval_id} deny",
            },
        ],
    }


def format_slack_approval_resolved(info: ApprovalInfo, action: ApprovalAction) -> list[dict]:
    """Build blocks for a decided approval (no buttons)."""
    icon = ACTION_ICONS.get(action, ":white_check_mark:")
    label = ACTION_LABELS.get(action, action)
    return [
        _header(f"Exec {label}"),
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Agent:*\n{info.agent}"},
                {"type": "mrkdwn", "text": f"*CWD:*\n`{info.cwd}`"},
            ],
        },
        _command_section(info.command),
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"{icon} {label} · ID: `{info.id}`"}],
        },
    ]


def format_slack_approval_expired(info: ApprovalInfo) -> list[dict]:
    """Build blocks for an approval that timed out (no buttons)."""
    return [
        _header("Expired"),
        {
            "type": "section",
            "fields": [{"type": "mrkdwn", "text": f"*Agent:*\n{info.agent}"}],
        },
        _command_section(info.command),
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f":clock1: Expired · ID: `{info.id}`"}],
        },
    ]


def slack_fallback_text(info: ApprovalInfo) -> str:
    """Plain text shown in notifications and clients without block support."""
    return f"Exec Approval Request: {info.command} ({info.agent})"
