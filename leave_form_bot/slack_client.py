"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Mapping, Sequence

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from .errors import ConfigurationError, translate_slack_error

WRITE_SCOPE = "chat:write"
WRITE_PUBLIC_SCOPE = "chat:write.public"


class Permission(str, Enum):
    SEND_MESSAGES = "send_messages"
    EMBED_LINKS = "embed_links"


@dataclass(frozen=True)
class BotIdentity:
    """Who the bot is, as reported by ``auth.test``."""

    user_id: str
    team_id: str | None = None
    scopes: FrozenSet[str] | None = None


@dataclass(frozen=True)
class ChannelInfo:
    id: str
    name: str | None = None
    is_private: bool = False
    is_archived: bool = False
    is_member: bool = False


def _parse_scopes(headers: Mapping[str, Any] | None) -> FrozenSet[str] | None:
    if not headers:
        return None
    for key, value in headers.items():
        if key.lower() != "x-oauth-scopes":
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(value)
        return frozenset(scope.strip() for scope in str(value).split(",") if scope.strip())
    return None


class SlackClient:
    """Encapsulate Slack WebClient interactions for easier testing."""

    def __init__(
        self,
        *,
        token: str | None = None,
        client: WebClient | None = None,
        allow_rich_content: bool = True,
    ) -> None:
        if client is None and token is None:
            raise ValueError("Either an instantiated client or a bot token must be provided.")

        self._client = client or WebClient(token=token)
        self._allow_rich_content = allow_rich_content
        self._identity: BotIdentity | None = None

    @property
    def client(self) -> WebClient:
        """Expose the underlying WebClient for advanced use cases."""

        return self._client

    def identify(self) -> BotIdentity:
        """Call ``auth.test`` once and cache the bot's identity and scopes."""

        if self._identity is None:
            response = self._client.auth_test()
            self._identity = BotIdentity(
                user_id=response.get("user_id") or "",
                team_id=response.get("team_id"),
                scopes=_parse_scopes(getattr(response, "headers", None)),
            )
        return self._identity

    def fetch_channel(self, channel_id: str) -> ChannelInfo:
        """Resolve *channel_id*, raising ``ConfigurationError`` when it does not exist."""

        if not channel_id:
            raise ConfigurationError("invalid or missing channel", channel_id=channel_id)
        try:
            response = self._client.conversations_info(channel=channel_id)
        except SlackApiError as exc:
            raise translate_slack_error(exc, channel_id=channel_id) from exc

        channel = response.get("channel") or {}
        if not channel.get("id"):
            raise ConfigurationError("invalid or missing channel", channel_id=channel_id)
        return ChannelInfo(
            id=channel["id"],
            name=channel.get("name"),
            is_private=bool(channel.get("is_private")),
            is_archived=bool(channel.get("is_archived")),
            is_member=bool(channel.get("is_member")),
        )

    def permissions_for(self, channel: ChannelInfo) -> FrozenSet[Permission]:
        """Return what the bot may do in *channel*.

        When ``auth.test`` did not report scopes, posting is only assumed to
        work in channels the bot is a member of.
        """

        if channel.is_archived:
            return frozenset()

        scopes = self.identify().scopes
        if scopes is not None and WRITE_SCOPE not in scopes:
            return frozenset()

        if not channel.is_member:
            if channel.is_private or scopes is None or WRITE_PUBLIC_SCOPE not in scopes:
                return frozenset()

        granted = {Permission.SEND_MESSAGES}
        if self._allow_rich_content:
            granted.add(Permission.EMBED_LINKS)
        return frozenset(granted)

    def post_message(
        self,
        *,
        channel: str,
        text: str,
        blocks: Sequence[Mapping[str, Any]] | None = None,
    ) -> Mapping[str, Any]:
        """Post a message, with optional Block Kit content, to a Slack channel."""

        if blocks is None:
            return self._client.chat_postMessage(channel=channel, text=text)
        return self._client.chat_postMessage(channel=channel, text=text, blocks=list(blocks))

    def post_ephemeral(self, *, channel: str, user: str, text: str) -> Mapping[str, Any]:
        """Post a message only *user* can see in *channel*."""

        return self._client.chat_postEphemeral(channel=channel, user=user, text=text)

    def open_modal(self, *, trigger_id: str, view: Mapping[str, Any]) -> Mapping[str, Any]:
        return self._client.views_open(trigger_id=trigger_id, view=dict(view))


