"""Handlers for the three leave form events.

Each handler contains its own failures and returns an ``Outcome``; none of
them raises back into Bolt's dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, List

from slack_sdk.errors import SlackApiError
import structlog

from leave_form_bot.config import AppSettings
from leave_form_bot.errors import (
    ConfigurationError,
    ErrorKind,
    LeaveBotError,
    MissingPermissionError,
    PresentationError,
    classify_error,
    slack_error_code,
    translate_slack_error,
)
from leave_form_bot.slack_client import Permission, SlackClient

from .interactions import EventKind, Interaction
from .messages import (
    OPEN_LEAVE_FORM_ACTION_ID,
    build_form_button_message,
    build_leave_announcement,
    build_plain_announcement,
)
from .modal import SUBMIT_LEAVE_FORM_CALLBACK_ID, build_leave_modal
from .models import LeaveRequest, Outcome, OutcomeStatus

FORM_ERROR_NOTICE = ":x: Something went wrong while opening the leave form. Please try again."
SUCCESS_NOTICE = ":white_check_mark: Your leave request has been announced."
PERMISSION_NOTICE = ":x: The bot is not allowed to post messages or cards in the announcement channel."
GENERIC_NOTICE = ":x: Something went wrong while posting your leave announcement."


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class HandlerContext:
    """Everything a handler needs besides the interaction itself."""

    slack: SlackClient
    settings: AppSettings
    clock: Callable[[], datetime] = field(default=_utcnow)


def reply_privately(slack: SlackClient, interaction: Interaction, text: str, log) -> List[str]:
    """Send *text* to the interaction's user only, at most once per interaction.

    Returns the replies actually sent so callers can report them.
    """

    if interaction.replied:
        log.info("private_reply_skipped", reason="already_replied")
        return []
    interaction.replied = True

    try:
        if interaction.channel_id:
            slack.post_ephemeral(channel=interaction.channel_id, user=interaction.user_id, text=text)
        else:
            # no originating channel; a DM is the only private surface left
            slack.post_message(channel=interaction.user_id, text=text)
    except SlackApiError as exc:
        log.error("private_reply_failed", error=slack_error_code(exc))
        return []
    except Exception:
        log.exception("private_reply_failed")
        return []
    return [text]


def announce_form_button(context: HandlerContext) -> Outcome:
    """Post the leave form button into the configured form channel."""

    channel_id = context.settings.form_channel_id
    log = structlog.get_logger().bind(operation="announce_form_button", channel=channel_id)
    slack = context.slack

    try:
        channel = slack.fetch_channel(channel_id)
        if Permission.SEND_MESSAGES not in slack.permissions_for(channel):
            raise ConfigurationError("missing send permission", channel_id=channel.id)
        payload = build_form_button_message()
        response = slack.post_message(channel=channel.id, text=payload["text"], blocks=payload["blocks"])
    except SlackApiError as exc:
        error = translate_slack_error(exc, channel_id=channel_id)
    except LeaveBotError as exc:
        error = exc
    except Exception as exc:
        log.exception("unexpected_handler_error")
        error = LeaveBotError(str(exc), channel_id=channel_id)
    else:
        log.info("form_button_posted", ts=response.get("ts"))
        return Outcome(status=OutcomeStatus.POSTED, channel_id=channel.id, message_ts=response.get("ts"))

    log.error(
        "form_button_failed",
        error_kind=error.kind.value,
        error=str(error),
        slack_error=error.slack_error,
    )
    return Outcome(status=OutcomeStatus.FAILED, error_kind=error.kind, channel_id=channel_id)


def present_leave_form(context: HandlerContext, interaction: Interaction) -> Outcome:
    """Open the leave form modal for whoever clicked the button."""

    if interaction.kind is not EventKind.BUTTON or interaction.identifier != OPEN_LEAVE_FORM_ACTION_ID:
        return Outcome.ignored()

    log = structlog.get_logger().bind(operation="present_leave_form", user_id=interaction.user_id)

    try:
        if not interaction.trigger_id:
            raise PresentationError("interaction carries no trigger_id")
        view = build_leave_modal(origin_channel_id=interaction.channel_id)
        context.slack.open_modal(trigger_id=interaction.trigger_id, view=view)
    except SlackApiError as exc:
        code = slack_error_code(exc)
        error = PresentationError(f"views.open failed: {code}", slack_error=code)
    except PresentationError as exc:
        error = exc
    except Exception as exc:
        log.exception("unexpected_handler_error")
        error = PresentationError(str(exc))
    else:
        log.info("leave_form_presented")
        return Outcome(status=OutcomeStatus.PRESENTED)

    log.error(
        "leave_form_presentation_failed",
        error_kind=error.kind.value,
        error=str(error),
        slack_error=error.slack_error,
    )
    replies = reply_privately(context.slack, interaction, FORM_ERROR_NOTICE, log)
    return Outcome(status=OutcomeStatus.FAILED, error_kind=error.kind, replies=replies)


def _notice_for(error: BaseException) -> str:
    if classify_error(error) is ErrorKind.PERMISSION:
        return PERMISSION_NOTICE
    return GENERIC_NOTICE


def handle_leave_submission(context: HandlerContext, interaction: Interaction) -> Outcome:
    """Announce a submitted leave form and acknowledge the submitter."""

    if interaction.kind is not EventKind.VIEW_SUBMISSION or interaction.identifier != SUBMIT_LEAVE_FORM_CALLBACK_ID:
        return Outcome.ignored()

    channel_id = context.settings.announce_channel_id
    log = structlog.get_logger().bind(
        operation="handle_leave_submission",
        user_id=interaction.user_id,
        channel=channel_id,
    )
    slack = context.slack
    request = LeaveRequest.from_values(interaction.user_id, interaction.values)

    try:
        channel = slack.fetch_channel(channel_id)
        permissions = slack.permissions_for(channel)
        if Permission.SEND_MESSAGES not in permissions:
            raise MissingPermissionError("missing send permission", channel_id=channel.id)

        if Permission.EMBED_LINKS in permissions:
            payload = build_leave_announcement(request, timestamp=context.clock())
        else:
            payload = build_plain_announcement(request)
        response = slack.post_message(channel=channel.id, text=payload["text"], blocks=payload.get("blocks"))
    except SlackApiError as exc:
        error = translate_slack_error(exc, channel_id=channel_id)
    except LeaveBotError as exc:
        error = exc
    except Exception as exc:
        log.exception("unexpected_handler_error")
        error = LeaveBotError(str(exc), channel_id=channel_id)
    else:
        log.info("leave_announcement_posted", rich="blocks" in payload, ts=response.get("ts"))
        replies = reply_privately(slack, interaction, SUCCESS_NOTICE, log)
        return Outcome(
            status=OutcomeStatus.POSTED,
            channel_id=channel.id,
            message_ts=response.get("ts"),
            replies=replies,
        )

    log.error(
        "leave_announcement_failed",
        error_kind=error.kind.value,
        error=str(error),
        slack_error=error.slack_error,
    )
    replies = reply_privately(slack, interaction, _notice_for(error), log)
    return Outcome(status=OutcomeStatus.FAILED, error_kind=error.kind, channel_id=channel_id, replies=replies)
