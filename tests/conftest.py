"""Shared fakes for the leave form bot tests."""

from datetime import UTC, datetime
from pathlib import Path
import sys
import threading

import pytest
from slack_sdk.errors import SlackApiError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover - import-time guard
    sys.path.insert(0, str(ROOT))

from leave_form_bot.config import AppSettings  # noqa: E402
from leave_form_bot.leave.handlers import HandlerContext  # noqa: E402
from leave_form_bot.slack_client import SlackClient  # noqa: E402

FORM_CHANNEL = "CFORM"
ANNOUNCE_CHANNEL = "CANNOUNCE"
FIXED_NOW = datetime(2024, 8, 9, 9, 30, tzinfo=UTC)


class FakeResponse(dict):
    """Minimal Slack response stub carrying headers and a status code."""

    def __init__(self, data=None, *, headers=None, status_code=200):
        super().__init__(data or {})
        self.headers = headers or {}
        self.status_code = status_code

    @property
    def data(self):
        return dict(self)


def slack_error(code: str, status_code: int = 200) -> SlackApiError:
    return SlackApiError(code, FakeResponse({"ok": False, "error": code}, status_code=status_code))


class FakeWebClient:
    """Records every Web API call; ``failures`` maps a method name to the error it raises."""

    def __init__(self, *, channels=None, scopes="chat:write,channels:read", user_id="UBOT"):
        self.channels = (
            channels
            if channels is not None
            else {
                FORM_CHANNEL: {"id": FORM_CHANNEL, "name": "leave-form", "is_member": True},
                ANNOUNCE_CHANNEL: {"id": ANNOUNCE_CHANNEL, "name": "leave-announcements", "is_member": True},
            }
        )
        self.scopes = scopes
        self.user_id = user_id
        self.failures = {}
        self.calls = []
        self._lock = threading.Lock()
        self._counter = 0

    def _record(self, method, kwargs):
        with self._lock:
            self.calls.append((method, kwargs))
            self._counter += 1
            counter = self._counter
        if method in self.failures:
            raise self.failures[method]
        return counter

    def calls_to(self, method):
        return [kwargs for name, kwargs in self.calls if name == method]

    def auth_test(self):
        self._record("auth_test", {})
        headers = {"x-oauth-scopes": self.scopes} if self.scopes is not None else {}
        return FakeResponse({"ok": True, "user_id": self.user_id, "team_id": "T1"}, headers=headers)

    def conversations_info(self, *, channel):
        self._record("conversations_info", {"channel": channel})
        if channel not in self.channels:
            raise slack_error("channel_not_found")
        return FakeResponse({"ok": True, "channel": self.channels[channel]})

    def chat_postMessage(self, **kwargs):
        counter = self._record("chat_postMessage", kwargs)
        return FakeResponse({"ok": True, "channel": kwargs["channel"], "ts": f"1700000000.{counter:06d}"})

    def chat_postEphemeral(self, **kwargs):
        self._record("chat_postEphemeral", kwargs)
        return FakeResponse({"ok": True, "message_ts": "1700000000.999999"})

    def views_open(self, **kwargs):
        self._record("views_open", kwargs)
        return FakeResponse({"ok": True, "view": {"id": "V1"}})


def make_settings(**overrides) -> AppSettings:
    values = {
        "SLACK_BOT_TOKEN": "xoxb-test",
        "SLACK_SIGNING_SECRET": "secret",
        "FORM_CHANNEL_ID": FORM_CHANNEL,
        "ANNOUNCE_CHANNEL_ID": ANNOUNCE_CHANNEL,
    }
    values.update(overrides)
    return AppSettings.model_validate(values)


@pytest.fixture
def web_client():
    return FakeWebClient()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def make_context(web_client, settings):
    def factory(*, client=None, allow_rich_content=True, app_settings=None):
        slack = SlackClient(client=client or web_client, allow_rich_content=allow_rich_content)
        return HandlerContext(slack=slack, settings=app_settings or settings, clock=lambda: FIXED_NOW)

    return factory


@pytest.fixture
def context(make_context):
    return make_context()
