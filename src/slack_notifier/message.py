"""Outbound message builder."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from slack_notifier.attachment import MARKDOWN_FIELDS_KEY, Attachment
from slack_notifier.exceptions import InvalidAttachmentError

if TYPE_CHECKING:
    from slack_notifier.client import Client


class IconType(Enum):
    """How a message icon is sent, named after its payload key."""

    URL = "icon_url"
    EMOJI = "icon_emoji"


def detect_icon_type(icon: str | None) -> IconType | None:
    """Infer the icon type from the shape of its value.

    ``:name:`` style values are emoji codes, anything else non-empty is a URL.
    """
    if not icon:
        return None
    if len(icon) >= 2 and icon[0] == ":" and icon[-1] == ":":
        return IconType.EMOJI
    return IconType.URL


class Message:
    """A Slack message under construction.

    Messages are created by :meth:`Client.create_message`, which copies the
    client's defaults into the new instance. Every setter returns the message
    so calls can be chained, and :meth:`send` may be called more than once.

    Example:
        >>> message = client.create_message()
        >>> message.to("#deploys").from_("ci-bot").with_icon(":rocket:")
        >>> message.attach({"title": "Build 42", "color": "good"}).send("Shipped")
    """

    def __init__(self, client: Client) -> None:
        self._client = client
        self._text: str | None = None
        self._channel: str | None = None
        self._username: str | None = None
        self._as_user = False
        self._icon: str | None = None
        self._icon_type: IconType | None = None
        self._allow_markdown = True
        self._markdown_in_attachments: list[str] = []
        self._attachments: list[Attachment] = []

    def __repr__(self) -> str:
        return (
            f"Message(text={self._text!r}, channel={self._channel!r}, "
            f"attachments={len(self._attachments)})"
        )

    def get_text(self) -> str | None:
        return self._text

    def set_text(self, text: str | None) -> Message:
        self._text = text
        return self

    def get_channel(self) -> str | None:
        return self._channel

    def set_channel(self, channel: str | None) -> Message:
        self._channel = channel
        return self

    def to(self, channel: str | None) -> Message:
        """Set the channel (or ``@user``) the message is posted to."""
        return self.set_channel(channel)

    def get_username(self) -> str | None:
        return self._username

    def set_username(self, username: str | None) -> Message:
        self._username = username
        return self

    def from_(self, username: str | None) -> Message:
        """Set the username the message is posted as."""
        return self.set_username(username)

    def is_as_user(self) -> bool:
        # Recorded on the message but not part of the webhook payload.
        return self._as_user

    def set_as_user(self, value: Any) -> Message:
        self._as_user = bool(value)
        return self

    def get_icon(self) -> str | None:
        return self._icon

    def get_icon_type(self) -> IconType | None:
        return self._icon_type

    def set_icon(self, icon: str | None) -> Message:
        """Set the message icon, or clear it when ``icon`` is empty.

        Args:
            icon: An emoji code such as ``:tada:`` or an image URL.
        """
        self._icon_type = detect_icon_type(icon)
        self._icon = icon if self._icon_type is not None else None
        return self

    def with_icon(self, icon: str | None) -> Message:
        return self.set_icon(icon)

    def is_allow_markdown(self) -> bool:
        return self._allow_markdown

    def set_allow_markdown(self, value: Any) -> Message:
        self._allow_markdown = bool(value)
        return self

    def enable_markdown(self) -> Message:
        return self.set_allow_markdown(True)

    def disable_markdown(self) -> Message:
        return self.set_allow_markdown(False)

    def get_markdown_in_attachments(self) -> list[str]:
        return list(self._markdown_in_attachments)

    def set_markdown_in_attachments(self, fields: Iterable[str]) -> Message:
        self._markdown_in_attachments = list(fields)
        return self

    def attach(self, attachment: Attachment | Mapping[str, Any]) -> Message:
        """Append an attachment to the message.

        A mapping is wrapped in an :class:`Attachment`. Unless it carries its
        own ``mrkdwn_in`` selection, it takes a copy of the message's current
        markdown fields.

        Args:
            attachment: An Attachment instance or a mapping of card data.

        Returns:
            The message.

        Raises:
            InvalidAttachmentError: If ``attachment`` is neither an
                Attachment nor a mapping.
        """
        if isinstance(attachment, Attachment):
            self._attachments.append(attachment)
            return self

        if isinstance(attachment, Mapping):
            attachment_object = Attachment(attachment)
            if attachment.get(MARKDOWN_FIELDS_KEY) is None:
                attachment_object.set_markdown_fields(self._markdown_in_attachments)
            self._attachments.append(attachment_object)
            return self

        raise InvalidAttachmentError(
            f"Attachment must be an Attachment instance or a mapping, "
            f"got {type(attachment).__name__}"
        )

    def get_attachments(self) -> list[Attachment]:
        return list(self._attachments)

    def set_attachments(self, attachments: Iterable[Attachment | Mapping[str, Any]]) -> Message:
        """Replace the attachments, attaching each item in order."""
        self.clear_attachments()
        for attachment in attachments:
            self.attach(attachment)
        return self

    def clear_attachments(self) -> Message:
        self._attachments = []
        return self

    def send(self, text: str | None = None) -> Message:
        """Deliver the message through its client.

        Args:
            text: Optional text that replaces the current message text.

        Returns:
            The message, which stays usable after sending.

        Raises:
            PayloadEncodingError: If the payload cannot be encoded.
            httpx.HTTPError: If the HTTP request fails.
        """
        if text:
            self.set_text(text)
        self._client.send_message(self)
        return self
