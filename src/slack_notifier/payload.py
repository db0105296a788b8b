"""Webhook payload construction and JSON encoding."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from slack_notifier.exceptions import PayloadEncodingError

if TYPE_CHECKING:
    from slack_notifier.client import Client
    from slack_notifier.message import Message

logger = logging.getLogger(__name__)


def build_payload(client: Client, message: Message) -> dict[str, Any]:
    """Build the webhook payload for a message.

    Link and unfurl settings come from the client; everything else comes
    from the message.

    Args:
        client: Client holding the endpoint-level settings.
        message: Message to serialize.

    Returns:
        A JSON-compatible dictionary in the incoming-webhook schema.
    """
    payload: dict[str, Any] = {
        "text": message.get_text(),
        "channel": message.get_channel(),
        "username": message.get_username(),
        "link_names": 1 if client.is_link_names() else 0,
        "unfurl_links": client.is_unfurl_links(),
        "unfurl_media": client.is_unfurl_media(),
        "mrkdwn": message.is_allow_markdown(),
    }

    icon = message.get_icon()
    icon_type = message.get_icon_type()
    if icon and icon_type is not None:
        payload[icon_type.value] = icon

    payload["attachments"] = [attachment.to_dict() for attachment in message.get_attachments()]
    return payload


def encode_payload(payload: dict[str, Any]) -> bytes:
    """Encode a payload as UTF-8 JSON.

    Raises:
        PayloadEncodingError: If the payload holds values JSON cannot
            represent or text that is not valid Unicode.
    """
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error("Failed to encode Slack payload: %s", e)
        raise PayloadEncodingError(f"JSON encoding error: {e}") from e
