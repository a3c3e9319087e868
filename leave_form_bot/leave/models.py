"""Request-scoped models for the leave form workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping

from pydantic import BaseModel, field_validator

from leave_form_bot.errors import ErrorKind

PLACEHOLDER = "-"


class LeaveRequest(BaseModel):
    """A single leave submission. Lives only while the submission is handled."""

    submitter_id: str
    name: str = PLACEHOLDER
    date_range: str = PLACEHOLDER
    reason: str = PLACEHOLDER

    @field_validator("name", "date_range", "reason", mode="before")
    @classmethod
    def _default_blank(cls, value: Any) -> str:
        if value is None:
            return PLACEHOLDER
        text = str(value).strip()
        return text or PLACEHOLDER

    @classmethod
    def from_values(cls, submitter_id: str, values: Mapping[str, str | None]) -> "LeaveRequest":
        """Build a request from the modal's ``name``/``date``/``reason`` values."""

        return cls(
            submitter_id=submitter_id,
            name=values.get("name"),
            date_range=values.get("date"),
            reason=values.get("reason"),
        )


class OutcomeStatus(str, Enum):
    POSTED = "posted"
    PRESENTED = "presented"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass
class Outcome:
    """What a handler did with one event."""

    status: OutcomeStatus
    error_kind: ErrorKind | None = None
    channel_id: str | None = None
    message_ts: str | None = None
    replies: List[str] = field(default_factory=list)

    @classmethod
    def ignored(cls) -> "Outcome":
        return cls(status=OutcomeStatus.IGNORED)
