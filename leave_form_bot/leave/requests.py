"""Utilities for parsing leave form submissions from Slack modal state."""

from __future__ import annotations

from typing import Any, Dict, Iterable

from pydantic import BaseModel, Field, ValidationError


class SubmissionValue(BaseModel):
    """Represents a single field value coming from Slack modal state."""

    value: str | None = Field(None, alias="value")


class SubmissionState(BaseModel):
    """Model to validate Slack modal state payloads."""

    values: Dict[str, Dict[str, SubmissionValue]]


def parse_submission(state_payload: Dict[str, Any], field_names: Iterable[str]) -> Dict[str, str | None]:
    """Return the raw value of each named field; absent fields map to ``None``."""

    try:
        state = SubmissionState.model_validate(state_payload)
    except ValidationError as exc:
        raise ValueError("Invalid submission payload") from exc

    submission: Dict[str, str | None] = {}
    for name in field_names:
        field_state = state.values.get(name, {})
        if name in field_state:
            submission[name] = field_state[name].value
        else:
            # block and action ids are both the field name; fall back to the first input
            submission[name] = next(iter(field_state.values()), SubmissionValue()).value
    return submission
