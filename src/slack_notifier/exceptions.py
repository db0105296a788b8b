"""Exceptions raised by the Slack notifier."""


class SlackNotifierError(Exception):
    """Base exception for Slack notifier errors."""


class InvalidAttachmentError(SlackNotifierError, TypeError):
    """Raised when a value cannot be attached to a message."""


class PayloadEncodingError(SlackNotifierError, ValueError):
    """Raised when a message payload cannot be encoded as JSON."""
