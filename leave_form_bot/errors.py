"""Typed failures raised while talking to Slack on behalf of the leave form."""

from __future__ import annotations

from enum import Enum

from slack_sdk.errors import SlackApiError


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    PRESENTATION = "presentation"
    UNEXPECTED = "unexpected"


class LeaveBotError(Exception):
    """Base class for failures the handlers know how to report."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, *, channel_id: str | None = None, slack_error: str | None = None) -> None:
        super().__init__(message)
        self.channel_id = channel_id
        self.slack_error = slack_error


class ConfigurationError(LeaveBotError):
    """A configured channel id does not resolve to a usable channel."""

    kind = ErrorKind.CONFIGURATION


class MissingPermissionError(LeaveBotError):
    """The bot lacks a permission it needs in a resolved channel."""

    kind = ErrorKind.PERMISSION


class PresentationError(LeaveBotError):
    """The leave form modal could not be shown to the user."""

    kind = ErrorKind.PRESENTATION


_CONFIGURATION_CODES = frozenset({"channel_not_found", "invalid_channel", "not_found"})

_PERMISSION_CODES = frozenset(
    {
        "not_in_channel",
        "missing_scope",
        "restricted_action",
        "restricted_action_read_only_channel",
        "restricted_action_non_threadable_channel",
        "is_archived",
        "no_permission",
        "not_allowed_token_type",
        "ekm_access_denied",
        "team_access_not_granted",
    }
)


def slack_error_code(exc: SlackApiError) -> str:
    """Return the Web API ``error`` code carried by *exc*, or its message."""

    response = getattr(exc, "response", None)
    if response is not None:
        try:
            code = response.get("error")
        except AttributeError:
            code = None
        if code:
            return str(code)
    return str(exc)


def translate_slack_error(exc: SlackApiError, *, channel_id: str | None = None) -> LeaveBotError:
    """Map a Web API failure onto the typed error hierarchy by its error code."""

    code = slack_error_code(exc)
    if code in _CONFIGURATION_CODES:
        return ConfigurationError("invalid or missing channel", channel_id=channel_id, slack_error=code)
    if code in _PERMISSION_CODES:
        return MissingPermissionError(f"Slack refused the call: {code}", channel_id=channel_id, slack_error=code)
    return LeaveBotError(f"Slack API call failed: {code}", channel_id=channel_id, slack_error=code)


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, LeaveBotError):
        return exc.kind
    if isinstance(exc, SlackApiError):
        return translate_slack_error(exc).kind
    return ErrorKind.UNEXPECTED
