"""Shared fixtures for slack_notifier tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import httpx
import pytest

from slack_notifier.client import Client

if TYPE_CHECKING:
    from collections.abc import Iterator

WEBHOOK_URL = "https://hooks.example/T"


@pytest.fixture
def http_client() -> MagicMock:
    """Create a mock httpx client."""
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def client(http_client: MagicMock) -> Client:
    """Create a client with a mocked transport."""
    return Client(WEBHOOK_URL, http_client=http_client)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove Slack-related environment variables."""
    for name in (
        "SLACK_WEBHOOK_URL",
        "SLACK_CHANNEL",
        "SLACK_USERNAME",
        "SLACK_ICON",
        "SLACK_AS_USER",
        "SLACK_LINK_NAMES",
        "SLACK_UNFURL_LINKS",
        "SLACK_UNFURL_MEDIA",
        "SLACK_ALLOW_MARKDOWN",
        "SLACK_MARKDOWN_IN_ATTACHMENTS",
        "SLACK_TIMEOUT",
        "LOG_LEVEL",
        "DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
