"""Pydantic-based configuration helpers for the leave form bot."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppSettings(BaseModel):
    """Settings required to initialise the Slack bot and its two channels."""

    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    form_channel_id: str = Field(..., alias="FORM_CHANNEL_ID")
    announce_channel_id: str = Field(..., alias="ANNOUNCE_CHANNEL_ID")
    announce_rich_content: bool = Field(True, alias="ANNOUNCE_RICH_CONTENT")
    post_form_button_on_startup: bool = Field(True, alias="POST_FORM_BUTTON_ON_STARTUP")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("form_channel_id", "announce_channel_id")
    @classmethod
    def _strip_channel_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Channel ids must not be blank")
        return cleaned

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{value}'")
        return level


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [str(error["loc"][0]) for error in exc.errors()]
        message = (
            "Missing or invalid environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc
