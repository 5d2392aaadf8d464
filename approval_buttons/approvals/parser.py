"""Parse the host gateway's plain-text exec approval messages."""

import re
from collections.abc import Mapping

from approval_buttons.approvals.types import (
    ApprovalAction,
    ApprovalInfo,
    ApprovalResolution,
    PendingEntry,
)

APPROVAL_MARKER = re.compile(r"exec approval required", re.IGNORECASE)
APPROVAL_ID = re.compile(r"\bID:\s*([a-f0-9-]+)", re.IGNORECASE)

# ```lang\n ... ``` after the label, possibly spanning several lines.
# An unclosed fence runs to the end of the text.
COMMAND_BLOCK = re.compile(
    r"\bCommand:\s*```(?:[\w-]*\n)?(.*?)(?:\n?```|\Z)", re.IGNORECASE | re.DOTALL
)
# Value on the label line, or on the line below it
COMMAND_INLINE = re.compile(r"\bCommand:[ \t]*(?:\n[ \t]*)?(.*)", re.IGNORECASE)

# (field, label) pairs extracted line by line
FIELD_LABELS: tuple[tuple[str, str], ...] = (
    ("cwd", "CWD"),
    ("host", "Host"),
    ("agent", "Agent"),
    ("security", "Security"),
    ("ask", "Ask"),
    ("expires", "Expires in"),
)

FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"\b{re.escape(label)}:\s*(.*)", re.IGNORECASE)
    for name, label in FIELD_LABELS
}

SHORT_ID_LENGTH = 8


def is_approval_text(text: str) -> bool:
    """Cheap check for the approval marker."""
    return bool(text) and APPROVAL_MARKER.search(text) is not None


def extract_id(text: str) -> str | None:
    match = APPROVAL_ID.search(text)
    if not match:
        return None
    return match.group(1).strip() or None


def extract_command(text: str) -> str | None:
    """Fenced block first, then the single-line form."""
    match = COMMAND_BLOCK.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    match = COMMAND_INLINE.search(text)
    if match:
        command = match.group(1).strip().strip("`").strip()
        if command:
            return command
    return None


def extract_fields(text: str) -> dict[str, str]:
    """
    Scan lines once and collect ``Label: value`` fields.

    The first non-empty value for each label wins.
    """
    found: dict[str, str] = {}
    for line in text.splitlines():
        for name, pattern in FIELD_PATTERNS.items():
            if name in found:
                continue
            match = pattern.search(line)
            if match:
                value = match.group(1).strip()
                if value:
                    found[name] = value
        if len(found) == len(FIELD_PATTERNS):
            break
    return found


def parse_approval_text(text: str) -> ApprovalInfo | None:
    """
    Parse a plain-text approval message into an ApprovalInfo.

    Returns None if the text is not an approval request or carries no ID.
    Everything besides the ID is best-effort and falls back to defaults.
    """
    if not is_approval_text(text):
        return None

    approval_id = extract_id(text)
    if not approval_id:
        return None

    fields = extract_fields(text)
    command = extract_command(text)
    if command:
        fields["command"] = command

    return ApprovalInfo(id=approval_id, **fields)


def format_approval_text(info: ApprovalInfo) -> str:
    """Render an ApprovalInfo in the host gateway's plain-text format."""
    return "\n".join([
        "🔒 Exec approval required",
        f"ID: {info.id}",
        "Command:",
        "```",
        info.command,
        "```",
        f"CWD: {info.cwd}",
        f"Host: {info.host}",
        f"Agent: {info.agent}",
        f"Security: {info.security}",
        f"Ask: {info.ask}",
        f"Expires in: {info.expires}",
    ])


def detect_approval_result(
    text: str,
    pending: Mapping[str, PendingEntry],
) -> ApprovalResolution | None:
    """
    Detect whether an outgoing message reports a decision on a pending approval.

    Matches the full ID or its 8-character short form. The first pending
    entry referenced wins; colliding short IDs are not disambiguated.
    """
    if not text:
        return None

    for approval_id in pending:
        if not approval_id:
            continue
        short_id = approval_id[:SHORT_ID_LENGTH]
        if approval_id in text or short_id in text:
            return ApprovalResolution(id=approval_id, action=infer_action(text))
    return None


def infer_action(text: str) -> ApprovalAction:
    """
    Infer the decision from message text, most specific keywords first.

    Falls back to allow-once when the ID is referenced without a clear signal.
    """
    lower = text.lower()
    if "allow-always" in lower or "always allow" in lower:
        return "allow-always"
    if "deny" in lower or "denied" in lower or "rejected" in lower:
        return "deny"
    if "allow-once" in lower or "allowed" in lower:
        return "allow-once"
    if "approved" in lower:
        return "allow-once"
    return "allow-once"
