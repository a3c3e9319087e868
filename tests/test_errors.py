"""Tests for error translation and classification."""

import pytest

from conftest import FakeResponse, slack_error
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
from slack_sdk.errors import SlackApiError


@pytest.mark.parametrize(
    ("code", "expected_type"),
    [
        ("channel_not_found", ConfigurationError),
        ("not_in_channel", MissingPermissionError),
        ("missing_scope", MissingPermissionError),
        ("restricted_action", MissingPermissionError),
        ("is_archived", MissingPermissionError),
        ("ratelimited", LeaveBotError),
    ],
)
def test_translate_slack_error_uses_error_code(code, expected_type):
    error = translate_slack_error(slack_error(code), channel_id="C1")

    assert type(error) is expected_type
    assert error.slack_error == code
    assert error.channel_id == "C1"


def test_slack_error_code_falls_back_to_message():
    exc = SlackApiError("boom", FakeResponse({"ok": False}))

    assert "boom" in slack_error_code(exc)


def test_permission_wording_in_message_does_not_change_kind():
    exc = SlackApiError("Missing Permissions", FakeResponse({"ok": False, "error": "internal_error"}))

    assert classify_error(exc) is ErrorKind.UNEXPECTED


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (ConfigurationError("x"), ErrorKind.CONFIGURATION),
        (MissingPermissionError("x"), ErrorKind.PERMISSION),
        (PresentationError("x"), ErrorKind.PRESENTATION),
        (LeaveBotError("x"), ErrorKind.UNEXPECTED),
        (slack_error("not_in_channel"), ErrorKind.PERMISSION),
        (RuntimeError("x"), ErrorKind.UNEXPECTED),
    ],
)
def test_classify_error(exc, kind):
    assert classify_error(exc) is kind
