"""Block Kit message builders for the leave form workflow."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from .modal import truncate
from .models import LeaveRequest

OPEN_LEAVE_FORM_ACTION_ID = "open_leave_form"

FORM_PROMPT_TEXT = "Need time off? Fill in the leave form."
FORM_BUTTON_LABEL = ":clipboard: Open leave form"

ANNOUNCEMENT_TITLE = ":loudspeaker: New leave request"
ANNOUNCEMENT_FOOTER = "Leave form bot :sparkles:"
MAX_SECTION_TEXT_LENGTH = 3000

# (block id, label, LeaveRequest attribute), in display order
ANNOUNCEMENT_FIELDS = (
    ("leave_name", ":bust_in_silhouette: Name", "name"),
    ("leave_date", ":date: Leave dates", "date_range"),
    ("leave_reason", ":memo: Reason", "reason"),
)


def escape_mrkdwn(text: str) -> str:
    """Escape the three characters Slack treats as control sequences."""

    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def mention(user_id: str) -> str:
    return f"<@{user_id}>"


def build_form_button_message() -> Dict[str, Any]:
    """Return the prompt message carrying the single ``open_leave_form`` button."""

    return {
        "text": FORM_PROMPT_TEXT,
        "blocks": [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": FORM_PROMPT_TEXT},
            },
            {
                "type": "actions",
                "block_id": "leave_form_entry",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": FORM_BUTTON_LABEL, "emoji": True},
                        "style": "primary",
                        "action_id": OPEN_LEAVE_FORM_ACTION_ID,
                    }
                ],
            },
        ],
    }


def _submitter_line(request: LeaveRequest) -> str:
    return f"Submitted by: {mention(request.submitter_id)}"


def _section_text(label: str, value: str) -> str:
    """Label and escaped value, cut to Slack's section limit without splitting an entity."""

    full = f"*{label}*\n{escape_mrkdwn(value)}"
    if len(full) <= MAX_SECTION_TEXT_LENGTH:
        return full
    head = truncate(full, MAX_SECTION_TEXT_LENGTH)[:-3]
    amp = head.rfind("&")
    if amp > head.rfind(";"):
        head = head[:amp]
    return head + "..."


def _slack_date(moment: datetime) -> str:
    epoch = int(moment.timestamp())
    fallback = moment.isoformat(timespec="seconds")
    return f"<!date^{epoch}^{{date_short_pretty}} at {{time}}|{fallback}>"


def build_leave_announcement(request: LeaveRequest, *, timestamp: datetime) -> Dict[str, Any]:
    """Build the rich announcement card for *request*.

    The top-level ``text`` mentions the submitter and doubles as the
    notification fallback.
    """

    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": ANNOUNCEMENT_TITLE, "emoji": True},
        }
    ]
    for block_id, label, attribute in ANNOUNCEMENT_FIELDS:
        text = _section_text(label, getattr(request, attribute))
        blocks.append(
            {
                "type": "section",
                "block_id": block_id,
                "text": {"type": "mrkdwn", "text": text},
            }
        )
    blocks.append(
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"{ANNOUNCEMENT_FOOTER} - {_slack_date(timestamp)}",
                }
            ],
        }
    )

    return {
        "text": _submitter_line(request),
        "blocks": blocks,
    }


def build_plain_announcement(request: LeaveRequest) -> Dict[str, Any]:
    """Plain-text announcement used where cards are not allowed."""

    lines = [
        f":loudspeaker: {escape_mrkdwn(request.name)} is on leave",
        escape_mrkdwn(request.date_range),
        escape_mrkdwn(request.reason),
        _submitter_line(request),
    ]
    return {"text": "\n".join(lines)}
