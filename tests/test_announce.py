"""Tests for posting the leave form button at startup."""

import structlog
from structlog.testing import capture_logs

from conftest import FORM_CHANNEL, FakeWebClient, make_settings, slack_error
from leave_form_bot.errors import ErrorKind
from leave_form_bot.leave import OutcomeStatus, announce_form_button


def test_posts_exactly_one_button_message(context, web_client):
    outcome = announce_form_button(context)

    assert outcome.status is OutcomeStatus.POSTED
    assert outcome.channel_id == FORM_CHANNEL
    posts = web_client.calls_to("chat_postMessage")
    assert len(posts) == 1
    assert posts[0]["channel"] == FORM_CHANNEL
    buttons = [
        element
        for block in posts[0]["blocks"]
        if block["type"] == "actions"
        for element in block["elements"]
    ]
    assert [button["action_id"] for button in buttons] == ["open_leave_form"]


def test_unknown_form_channel_is_a_configuration_error(make_context, web_client):
    context = make_context(app_settings=make_settings(FORM_CHANNEL_ID="CNOPE"))

    with capture_logs() as logs:
        outcome = announce_form_button(context)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error_kind is ErrorKind.CONFIGURATION
    assert web_client.calls_to("chat_postMessage") == []
    failures = [entry for entry in logs if entry["event"] == "form_button_failed"]
    assert failures[0]["error"] == "invalid or missing channel"
    assert failures[0]["slack_error"] == "channel_not_found"


def test_missing_send_permission_is_a_configuration_error(make_context):
    client = FakeWebClient(channels={FORM_CHANNEL: {"id": FORM_CHANNEL, "is_member": False}})
    context = make_context(client=client)

    with capture_logs() as logs:
        outcome = announce_form_button(context)

    assert outcome.error_kind is ErrorKind.CONFIGURATION
    assert client.calls_to("chat_postMessage") == []
    assert [entry["error"] for entry in logs if entry["event"] == "form_button_failed"] == ["missing send permission"]


def test_send_failure_is_logged_not_raised(context, web_client):
    web_client.failures["chat_postMessage"] = slack_error("not_in_channel")

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        outcome = announce_form_button(context)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error_kind is ErrorKind.PERMISSION
    assert any(entry["event"] == "form_button_failed" for entry in logs)
    assert len(web_client.calls_to("chat_postMessage")) == 1


def test_unexpected_error_is_contained(context, web_client, monkeypatch):
    def broken(*_args, **_kwargs):
        raise RuntimeError("socket closed")

    monkeypatch.setattr(web_client, "chat_postMessage", broken)

    outcome = announce_form_button(context)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error_kind is ErrorKind.UNEXPECTED
