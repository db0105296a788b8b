"""Slack incoming-webhook client.

The client holds the webhook endpoint and the default presentation settings
for outgoing messages, creates :class:`Message` builders seeded with those
defaults, and delivers finished messages with a single HTTP POST.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

from slack_notifier.message import Message
from slack_notifier.payload import build_payload, encode_payload

if TYPE_CHECKING:
    from slack_notifier.config import SlackSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
JSON_HEADERS = {"Content-Type": "application/json"}


class Client:
    """Endpoint configuration and delivery for Slack webhook messages.

    Example:
        >>> client = Client(
        ...     "https://hooks.slack.com/services/T000/B000/XXXX",
        ...     {"channel": "#general", "username": "deploy-bot", "link_names": True},
        ... )
        >>> client.create_message().attach({"title": "v1.2.0"}).send("Released")
    """

    def __init__(
        self,
        endpoint: str,
        options: Mapping[str, Any] | None = None,
        *,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Incoming-webhook URL messages are posted to.
            options: Default settings. Recognized keys are ``channel``,
                ``username``, ``as_user``, ``icon``, ``link_names``,
                ``unfurl_links``, ``unfurl_media``, ``allow_markdown`` and
                ``markdown_in_attachments``. Other keys are ignored, as are
                keys whose value is None.
            http_client: Optional httpx client used for delivery. When omitted
                a short-lived client is opened for each send.
            timeout: Request timeout in seconds for the short-lived client.

        Raises:
            ValueError: If ``endpoint`` is empty.
        """
        self._endpoint = ""
        self.set_endpoint(endpoint)

        self._channel: str | None = None
        self._username: str | None = None
        self._as_user = False
        self._icon: str | None = None
        self._link_names = False
        self._unfurl_links = False
        self._unfurl_media = True
        self._allow_markdown = True
        self._markdown_in_attachments: list[str] = []

        self._http_client = http_client
        self.timeout = timeout

        self._apply_options(options or {})

    def _apply_options(self, options: Mapping[str, Any]) -> None:
        setters = {
            "channel": self.set_default_channel,
            "username": self.set_default_username,
            "as_user": self.set_default_as_user,
            "icon": self.set_default_icon,
            "link_names": self.set_link_names,
            "unfurl_links": self.set_unfurl_links,
            "unfurl_media": self.set_unfurl_media,
            "allow_markdown": self.set_allow_markdown,
            "markdown_in_attachments": self.set_markdown_in_attachments,
        }
        for key, setter in setters.items():
            value = options.get(key)
            if value is not None:
                setter(value)

    @classmethod
    def from_settings(
        cls,
        settings: SlackSettings,
        *,
        http_client: httpx.Client | None = None,
    ) -> Client:
        """Create a client from environment settings.

        Raises:
            ValueError: If no webhook URL is configured.
        """
        if settings.webhook_url is None:
            raise ValueError("SLACK_WEBHOOK_URL is not configured")
        return cls(
            settings.webhook_url.get_secret_value(),
            settings.client_options(),
            http_client=http_client,
            timeout=settings.timeout,
        )

    def __repr__(self) -> str:
        return f"Client(channel={self._channel!r}, username={self._username!r})"

    def get_endpoint(self) -> str:
        return self._endpoint

    def set_endpoint(self, endpoint: str) -> Client:
        if not endpoint or not isinstance(endpoint, str):
            raise ValueError("Webhook endpoint must be a non-empty string")
        self._endpoint = endpoint
        return self

    def get_default_channel(self) -> str | None:
        return self._channel

    def set_default_channel(self, channel: str | None) -> Client:
        self._channel = channel
        return self

    def get_default_username(self) -> str | None:
        return self._username

    def set_default_username(self, username: str | None) -> Client:
        self._username = username
        return self

    def is_default_as_user(self) -> bool:
        return self._as_user

    def set_default_as_user(self, value: Any) -> Client:
        self._as_user = bool(value)
        return self

    def get_default_icon(self) -> str | None:
        return self._icon

    def set_default_icon(self, icon: str | None) -> Client:
        self._icon = icon
        return self

    def is_link_names(self) -> bool:
        return self._link_names

    def set_link_names(self, value: Any) -> Client:
        self._link_names = bool(value)
        return self

    def is_unfurl_links(self) -> bool:
        return self._unfurl_links

    def set_unfurl_links(self, value: Any) -> Client:
        self._unfurl_links = bool(value)
        return self

    def is_unfurl_media(self) -> bool:
        return self._unfurl_media

    def set_unfurl_media(self, value: Any) -> Client:
        self._unfurl_media = bool(value)
        return self

    def is_allow_markdown(self) -> bool:
        return self._allow_markdown

    def set_allow_markdown(self, value: Any) -> Client:
        self._allow_markdown = bool(value)
        return self

    def get_markdown_in_attachments(self) -> list[str]:
        return list(self._markdown_in_attachments)

    def set_markdown_in_attachments(self, fields: Iterable[str]) -> Client:
        self._markdown_in_attachments = list(fields)
        return self

    def create_message(self) -> Message:
        """Create a message seeded with a copy of the current defaults.

        Later changes to the client do not affect messages already created.
        """
        message = Message(self)
        message.set_channel(self.get_default_channel())
        message.set_username(self.get_default_username())
        message.set_as_user(self.is_default_as_user())
        message.set_icon(self.get_default_icon())
        message.set_allow_markdown(self.is_allow_markdown())
        message.set_markdown_in_attachments(self.get_markdown_in_attachments())
        return message

    def prepare_payload(self, message: Message) -> dict[str, Any]:
        """Build the webhook payload for ``message``."""
        return build_payload(self, message)

    def send_message(self, message: Message) -> None:
        """Post a message to the webhook endpoint.

        The payload is encoded before any request is made, so an encoding
        failure never reaches the network. The response is not inspected.

        Args:
            message: Message to deliver.

        Raises:
            PayloadEncodingError: If the payload cannot be encoded as JSON.
            httpx.HTTPError: If the request fails at the transport level.
        """
        body = encode_payload(self.prepare_payload(message))

        logger.debug(
            "Posting Slack message (%d bytes) to channel %s", len(body), message.get_channel()
        )
        if self._http_client is not None:
            self._http_client.post(self._endpoint, content=body, headers=JSON_HEADERS)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                client.post(self._endpoint, content=body, headers=JSON_HEADERS)

        logger.info("Slack message posted to channel %s", message.get_channel())
