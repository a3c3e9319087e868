"""Builder for the leave form modal."""

from __future__ import annotations

import json
from typing import Dict, List

SUBMIT_LEAVE_FORM_CALLBACK_ID = "submit_leave_form"

MAX_TITLE_LENGTH = 24
MAX_LABEL_LENGTH = 75

LEAVE_FORM_TITLE = ":memo: Leave form"

# (field name, label, multiline, max length), in display order
LEAVE_FIELDS = (
    ("name", "Name", False, 80),
    ("date", "Leave dates (e.g. 09/08 or 09-10/08)", False, 80),
    ("reason", "Reason for leave", True, 1000),
)
LEAVE_FIELD_NAMES = tuple(entry[0] for entry in LEAVE_FIELDS)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _field_to_block(name: str, label: str, multiline: bool, max_length: int) -> Dict:
    element: Dict[str, object] = {
        "type": "plain_text_input",
        "action_id": name,
        "max_length": max_length,
    }
    if multiline:
        element["multiline"] = True

    return {
        "type": "input",
        "block_id": name,
        "label": {
            "type": "plain_text",
            "text": truncate(label, MAX_LABEL_LENGTH),
            "emoji": True,
        },
        "element": element,
        "optional": False,
    }


def build_leave_modal(*, origin_channel_id: str | None = None) -> Dict:
    """Build the modal payload shown when someone clicks the leave form button.

    *origin_channel_id* travels in ``private_metadata`` so the submission can
    be acknowledged privately in the channel the button was clicked in.
    """

    blocks: List[Dict] = [_field_to_block(*entry) for entry in LEAVE_FIELDS]
    metadata = {"channel_id": origin_channel_id} if origin_channel_id else {}

    return {
        "type": "modal",
        "callback_id": SUBMIT_LEAVE_FORM_CALLBACK_ID,
        "private_metadata": json.dumps(metadata),
        "title": {"type": "plain_text", "text": truncate(LEAVE_FORM_TITLE, MAX_TITLE_LENGTH), "emoji": True},
        "submit": {"type": "plain_text", "text": "Submit", "emoji": True},
        "close": {"type": "plain_text", "text": "Cancel", "emoji": True},
        "blocks": blocks,
    }
