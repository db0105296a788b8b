"""Tests for the webhook client."""

from __future__ import annotations

import json
import os
from unittest.mock import MagicMock, patch

import httpx
import pytest

from slack_notifier.client import JSON_HEADERS, Client
from slack_notifier.config import SlackSettings
from slack_notifier.exceptions import PayloadEncodingError
from slack_notifier.message import IconType

WEBHOOK_URL = "https://hooks.example/T"


class TestClientInit:
    """Tests for client construction and options."""

    def test_defaults(self) -> None:
        """A client without options uses the built-in defaults."""
        client = Client(WEBHOOK_URL)

        assert client.get_endpoint() == WEBHOOK_URL
        assert client.get_default_channel() is None
        assert client.get_default_username() is None
        assert client.get_default_icon() is None
        assert client.is_default_as_user() is False
        assert client.is_link_names() is False
        assert client.is_unfurl_links() is False
        assert client.is_unfurl_media() is True
        assert client.is_allow_markdown() is True
        assert client.get_markdown_in_attachments() == []

    def test_options(self) -> None:
        """Recognized options set the defaults."""
        client = Client(
            WEBHOOK_URL,
            {
                "channel": "#general",
                "username": "bot",
                "as_user": True,
                "icon": ":robot_face:",
                "link_names": True,
                "unfurl_links": True,
                "unfurl_media": False,
                "allow_markdown": False,
                "markdown_in_attachments": ["text", "title"],
            },
        )

        assert client.get_default_channel() == "#general"
        assert client.get_default_username() == "bot"
        assert client.is_default_as_user() is True
        assert client.get_default_icon() == ":robot_face:"
        assert client.is_link_names() is True
        assert client.is_unfurl_links() is True
        assert client.is_unfurl_media() is False
        assert client.is_allow_markdown() is False
        assert client.get_markdown_in_attachments() == ["text", "title"]

    def test_unknown_options_ignored(self) -> None:
        """Unrecognized option keys are silently ignored."""
        client = Client(WEBHOOK_URL, {"channel": "#a", "colour": "red", "retries": 5})

        assert client.get_default_channel() == "#a"

    def test_none_options_ignored(self) -> None:
        """Options set to None leave the defaults in place."""
        client = Client(WEBHOOK_URL, {"unfurl_media": None, "channel": None})

        assert client.is_unfurl_media() is True
        assert client.get_default_channel() is None

    def test_boolean_options_coerced(self) -> None:
        """Boolean options are coerced with bool()."""
        client = Client(WEBHOOK_URL, {"link_names": 1, "unfurl_media": 0})

        assert client.is_link_names() is True
        assert client.is_unfurl_media() is False

    @pytest.mark.parametrize("endpoint", ["", None])
    def test_empty_endpoint_raises(self, endpoint: str | None) -> None:
        """An endpoint is required."""
        with pytest.raises(ValueError, match="non-empty"):
            Client(endpoint)  # type: ignore[arg-type]

    def test_setters_chain(self) -> None:
        """Setters return the client."""
        client = Client(WEBHOOK_URL)

        result = (
            client.set_endpoint("https://hooks.example/U")
            .set_default_channel("#c")
            .set_default_username("u")
            .set_default_icon("https://example.com/i.png")
            .set_default_as_user(True)
            .set_link_names(True)
            .set_unfurl_links(True)
            .set_unfurl_media(False)
            .set_allow_markdown(False)
            .set_markdown_in_attachments(["pretext"])
        )

        assert result is client
        assert client.get_endpoint() == "https://hooks.example/U"
        assert client.get_markdown_in_attachments() == ["pretext"]

    def test_from_settings(self) -> None:
        """Clients can be built from environment settings."""
        env = {
            "SLACK_WEBHOOK_URL": WEBHOOK_URL,
            "SLACK_CHANNEL": "#alerts",
            "SLACK_LINK_NAMES": "true",
            "SLACK_TIMEOUT": "2.5",
        }
        with patch.dict(os.environ, env, clear=True):
            client = Client.from_settings(SlackSettings())

        assert client.get_endpoint() == WEBHOOK_URL
        assert client.get_default_channel() == "#alerts"
        assert client.is_link_names() is True
        assert client.timeout == 2.5

    def test_from_settings_without_webhook(self) -> None:
        """A missing webhook URL is rejected."""
        with patch.dict(os.environ, {}, clear=True):
            settings = SlackSettings()

        with pytest.raises(ValueError, match="SLACK_WEBHOOK_URL"):
            Client.from_settings(settings)


class TestCreateMessage:
    """Tests for Client.create_message."""

    def test_copies_defaults(self) -> None:
        """New messages start from the client defaults."""
        client = Client(
            WEBHOOK_URL,
            {
                "channel": "#general",
                "username": "bot",
                "as_user": True,
                "icon": ":tada:",
                "allow_markdown": False,
                "markdown_in_attachments": ["title"],
            },
        )

        message = client.create_message()

        assert message.get_channel() == "#general"
        assert message.get_username() == "bot"
        assert message.is_as_user() is True
        assert message.get_icon() == ":tada:"
        assert message.get_icon_type() is IconType.EMOJI
        assert message.is_allow_markdown() is False
        assert message.get_markdown_in_attachments() == ["title"]

    def test_later_changes_do_not_affect_message(self) -> None:
        """Defaults are copied by value."""
        client = Client(
            WEBHOOK_URL,
            {"channel": "#general", "icon": ":tada:", "markdown_in_attachments": ["title"]},
        )
        message = client.create_message()

        client.set_default_channel("#other")
        client.set_default_icon("https://example.com/i.png")
        client.set_allow_markdown(False)
        client.set_markdown_in_attachments(["text"])

        assert message.get_channel() == "#general"
        assert message.get_icon() == ":tada:"
        assert message.is_allow_markdown() is True
        assert message.get_markdown_in_attachments() == ["title"]

    def test_returns_new_instance(self) -> None:
        """Each call creates a separate message."""
        client = Client(WEBHOOK_URL)

        assert client.create_message() is not client.create_message()


class TestSendMessage:
    """Tests for delivery."""

    def test_posts_json_once(self, client: Client, http_client: MagicMock) -> None:
        """A send is a single POST of the JSON payload."""
        client.set_default_channel("#general")

        client.create_message().send("hi")

        http_client.post.assert_called_once()
        args, kwargs = http_client.post.call_args
        assert args == (WEBHOOK_URL,)
        assert kwargs["headers"] == JSON_HEADERS
        assert json.loads(kwargs["content"]) == {
            "text": "hi",
            "channel": "#general",
            "username": None,
            "link_names": 0,
            "unfurl_links": False,
            "unfurl_media": True,
            "mrkdwn": True,
            "attachments": [],
        }

    def test_non_ascii_not_escaped(self, client: Client, http_client: MagicMock) -> None:
        """Unicode text is sent as UTF-8, not as escape sequences."""
        client.create_message().send("café ✓")

        body = http_client.post.call_args.kwargs["content"]
        assert "café ✓".encode() in body

    def test_encoding_error_skips_post(self, client: Client, http_client: MagicMock) -> None:
        """No request is made when the payload cannot be encoded."""
        message = client.create_message().set_text("\ud800")

        with pytest.raises(PayloadEncodingError, match="JSON encoding error"):
            message.send()

        http_client.post.assert_not_called()

    def test_message_reusable_after_encoding_error(
        self, client: Client, http_client: MagicMock
    ) -> None:
        """A failed send leaves the message usable."""
        message = client.create_message().set_text("\ud800")
        with pytest.raises(PayloadEncodingError):
            message.send()

        message.send("fixed")

        http_client.post.assert_called_once()

    def test_transport_error_propagates(self, client: Client, http_client: MagicMock) -> None:
        """httpx errors are not wrapped."""
        http_client.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(httpx.ConnectError):
            client.create_message().send("hi")

    def test_response_not_inspected(self, client: Client, http_client: MagicMock) -> None:
        """Error statuses are not treated as failures."""
        http_client.post.return_value = MagicMock(status_code=500, text="invalid_payload")

        client.create_message().send("hi")

        http_client.post.assert_called_once()

    def test_resend_posts_again(self, client: Client, http_client: MagicMock) -> None:
        """Sending twice posts twice."""
        message = client.create_message().set_text("hi")

        message.send()
        message.send()

        assert http_client.post.call_count == 2

    def test_opens_client_when_none_injected(self) -> None:
        """Without an injected client a short-lived httpx.Client is used."""
        client = Client(WEBHOOK_URL, timeout=3.0)

        with patch("httpx.Client") as mock_client_class:
            mock_client = MagicMock()
            mock_client.__enter__.return_value = mock_client
            mock_client.__exit__.return_value = None
            mock_client_class.return_value = mock_client

            client.create_message().send("hi")

            mock_client_class.assert_called_once_with(timeout=3.0)
            mock_client.post.assert_called_once()
            assert mock_client.post.call_args.args == (WEBHOOK_URL,)
