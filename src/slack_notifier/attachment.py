"""Attachment value object for Slack messages."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

MARKDOWN_FIELDS_KEY = "mrkdwn_in"


def _field_list(fields: str | Iterable[str]) -> list[str]:
    """Normalize a field selection, treating a bare string as one field name."""
    if isinstance(fields, str):
        return [fields]
    return list(fields)


class Attachment:
    """A structured card rendered inside a Slack message.

    The attachment keeps its card data (title, fallback, color, fields, ...)
    as pass-through key/value pairs. Only the markdown-field selection is
    interpreted: a ``mrkdwn_in`` key in the construction data becomes the
    explicit selection and is re-emitted by :meth:`to_dict`.

    Example:
        >>> attachment = Attachment({"title": "Deploy", "mrkdwn_in": ["text"]})
        >>> attachment.to_dict()
        {'title': 'Deploy', 'mrkdwn_in': ['text']}
    """

    def __init__(self, attributes: Mapping[str, Any] | None = None) -> None:
        """Initialize the attachment.

        Args:
            attributes: Card data. A ``mrkdwn_in`` entry, if present, selects
                which fields Slack renders as markdown.
        """
        data = dict(attributes or {})
        self._markdown_fields: list[str] = _field_list(data.pop(MARKDOWN_FIELDS_KEY, None) or [])
        self._attributes: dict[str, Any] = data

    def __repr__(self) -> str:
        return f"Attachment({self.to_dict()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attachment):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Read-only view of the card data, excluding ``mrkdwn_in``."""
        return MappingProxyType(self._attributes)

    def get(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def set(self, key: str, value: Any) -> Attachment:
        if key == MARKDOWN_FIELDS_KEY:
            return self.set_markdown_fields(value or [])
        self._attributes[key] = value
        return self

    def get_markdown_fields(self) -> list[str]:
        return list(self._markdown_fields)

    def set_markdown_fields(self, fields: Iterable[str]) -> Attachment:
        self._markdown_fields = _field_list(fields)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Project the attachment into its wire format.

        Returns:
            The card data, plus ``mrkdwn_in`` when the markdown-field
            selection is non-empty.
        """
        data = dict(self._attributes)
        if self._markdown_fields:
            data[MARKDOWN_FIELDS_KEY] = list(self._markdown_fields)
        return data
