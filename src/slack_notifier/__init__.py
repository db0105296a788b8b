"""Slack incoming-webhook message builder and client."""

from slack_notifier.attachment import Attachment
from slack_notifier.client import Client
from slack_notifier.exceptions import (
    InvalidAttachmentError,
    PayloadEncodingError,
    SlackNotifierError,
)
from slack_notifier.message import IconType, Message
from slack_notifier.payload import build_payload, encode_payload

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "Client",
    "IconType",
    "InvalidAttachmentError",
    "Message",
    "PayloadEncodingError",
    "SlackNotifierError",
    "__version__",
    "build_payload",
    "encode_payload",
]
