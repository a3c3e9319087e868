"""Utilities for turning Slack interaction payloads into ``Interaction`` values."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

from .modal import LEAVE_FIELD_NAMES
from .requests import parse_submission


class EventKind(str, Enum):
    BUTTON = "button"
    BLOCK_ACTION = "block_action"
    VIEW_SUBMISSION = "view_submission"


@dataclass
class Interaction:
    """One user-triggered event and enough context to answer that user.

    ``replied`` flips to True the first time a private reply is attempted
    and is never reset.
    """

    kind: EventKind
    identifier: str
    user_id: str
    channel_id: str | None = None
    trigger_id: str | None = None
    values: Dict[str, str | None] = field(default_factory=dict)
    replied: bool = False


def _parse_metadata(raw: str | None) -> Mapping[str, Any]:
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return payload if isinstance(payload, dict) else {}


def interaction_from_action(body: Mapping[str, Any]) -> Interaction:
    """Build an interaction from a ``block_actions`` payload."""

    actions = body.get("actions") or [{}]
    action = actions[0]
    kind = EventKind.BUTTON if action.get("type") == "button" else EventKind.BLOCK_ACTION
    return Interaction(
        kind=kind,
        identifier=action.get("action_id") or "",
        user_id=(body.get("user") or {}).get("id") or "",
        channel_id=(body.get("channel") or {}).get("id"),
        trigger_id=body.get("trigger_id"),
    )


def interaction_from_view_submission(body: Mapping[str, Any]) -> Interaction:
    """Build an interaction from a ``view_submission`` payload.

    Malformed modal state yields an interaction with no values; the handler
    then falls back to placeholders.
    """

    view = body.get("view") or {}
    metadata = _parse_metadata(view.get("private_metadata"))
    state_payload = {"values": (view.get("state") or {}).get("values", {})}
    try:
        values = parse_submission(state_payload, LEAVE_FIELD_NAMES)
    except ValueError:
        values = {}

    return Interaction(
        kind=EventKind.VIEW_SUBMISSION,
        identifier=view.get("callback_id") or "",
        user_id=(body.get("user") or {}).get("id") or "",
        channel_id=metadata.get("channel_id"),
        values=values,
    )
