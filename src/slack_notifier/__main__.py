"""CLI entry point for the Slack notifier.

Sends a single message to the configured incoming webhook.

Usage:
    python -m slack_notifier [text] [options]
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.config
import sys
from typing import Any, NoReturn

import httpx
from pydantic import ValidationError

from slack_notifier import __version__
from slack_notifier.client import Client
from slack_notifier.config import Settings, clear_settings_cache, get_settings
from slack_notifier.exceptions import SlackNotifierError
from slack_notifier.payload import encode_payload

APP_NAME = "slack-notifier"
APP_VERSION = __version__

DRY_RUN_ENDPOINT = "https://hooks.slack.com/services/dry-run"

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Send a message to a Slack incoming webhook.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m slack_notifier "Deploy finished"          Send to the default channel
  python -m slack_notifier "hi" --channel "#ops"      Override the channel
  python -m slack_notifier "hi" --dry-run             Print the payload only
  python -m slack_notifier --config-check             Validate config and exit
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Message text",
    )

    parser.add_argument("--channel", default=None, help="Channel to post to")
    parser.add_argument("--username", default=None, help="Username to post as")
    parser.add_argument("--icon", default=None, help="Emoji code (:name:) or image URL")

    parser.add_argument(
        "--attachment",
        action="append",
        default=[],
        metavar="JSON",
        help="Attachment as a JSON object (repeatable)",
    )

    parser.add_argument(
        "--no-markdown",
        action="store_true",
        help="Send the text without markdown formatting",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without sending",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload instead of posting it",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Print the configuration summary.

    Returns:
        Exit code (0 when a webhook is configured).
    """
    summary = settings.redacted_summary()
    print("Configuration:")
    print(f"  Webhook: {summary['webhook_url']}")
    print(f"  Channel: {summary['channel']}")
    print(f"  Username: {summary['username']}")
    print(f"  Icon: {summary['icon']}")
    print(f"  Log Level: {summary['log_level']}")
    print()

    if not settings.slack.enabled:
        print("SLACK_WEBHOOK_URL is not set.", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print("Configuration is valid!")
    return EXIT_SUCCESS


def parse_attachments(values: list[str]) -> list[dict[str, Any]]:
    """Parse ``--attachment`` JSON strings.

    Raises:
        ValueError: If a value is not a JSON object.
    """
    attachments = []
    for value in values:
        data = json.loads(value)
        if not isinstance(data, dict):
            raise ValueError(f"Attachment must be a JSON object: {value}")
        attachments.append(data)
    return attachments


def run_send(settings: Settings, args: argparse.Namespace, dry_run: bool) -> int:
    """Build the message from arguments and send it.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    if not settings.slack.enabled and not dry_run:
        print("SLACK_WEBHOOK_URL is not set.", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        attachments = parse_attachments(args.attachment)
    except ValueError as e:
        print(f"Invalid attachment: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if settings.slack.enabled:
        client = Client.from_settings(settings.slack)
    else:
        # Dry runs only build the payload, so the endpoint is never used.
        client = Client(DRY_RUN_ENDPOINT, settings.slack.client_options())
    message = client.create_message()
    if args.channel:
        message.to(args.channel)
    if args.username:
        message.from_(args.username)
    if args.icon:
        message.set_icon(args.icon)
    if args.no_markdown:
        message.disable_markdown()
    message.set_text(args.text).set_attachments(attachments)

    try:
        if dry_run:
            payload = client.prepare_payload(message)
            print(encode_payload(payload).decode("utf-8"))
            return EXIT_SUCCESS

        message.send()
        return EXIT_SUCCESS
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except (SlackNotifierError, httpx.HTTPError) as e:
        logger.error("Failed to send message: %s", e)
        return EXIT_ERROR


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    if args.config_check:
        sys.exit(run_config_check(settings))

    if not args.text and not args.attachment:
        parser.error("message text or at least one --attachment is required")

    dry_run = args.dry_run or settings.dry_run
    sys.exit(run_send(settings, args, dry_run))


if __name__ == "__main__":
    main()
