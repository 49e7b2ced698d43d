"""Command-line entry point for mail2flickr."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mail2flickr.core import (
    ConfigurationError,
    ListenerConfig,
    configure_logging,
    load_listener_config,
)
from mail2flickr.listener import build_listener
from mail2flickr.transport import ImapError


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Upload image attachments from incoming mail to Flickr"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "watch", "poll"],
        help="Operation to execute.",
    )
    return parser


def report_upload(err: Exception | None, photo_id: str | None) -> None:
    """Print the outcome of a single upload."""
    if err is None:
        print(f"Uploaded photo. photoId={photo_id}")
    else:
        print(f"Upload failed: {err}")


def execute(args: argparse.Namespace, config: ListenerConfig) -> int:
    """Execute the requested CLI command and return an exit status."""
    command = args.command
    if command == "info":
        _print_info(config)
        return 0

    config = config.with_callback(report_upload)
    if command == "poll":
        config = _single_cycle(config)
    try:
        report = build_listener(config).run()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 2
    except ImapError as exc:
        print(f"Mailbox error: {exc}")
        return 1
    except KeyboardInterrupt:
        print("Interrupted")
        return 0
    print(
        f"Processed {report.messages} message(s) with {report.attachments} "
        f"attachment(s); {report.failed} failed."
    )
    return 0


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    config = load_listener_config(env_file=args.env_file)
    configure_logging(config.logging)
    sys.exit(execute(args, config))


def _print_info(config: ListenerConfig) -> None:
    filters = config.filters
    print(f"IMAP host: {config.imap.host}:{config.imap.port}")
    print(f"Mailbox: {config.imap.mailbox}")
    print(f"Subjects: {', '.join(filters.subjects) if filters.subjects else '(any)'}")
    print(f"Strict subject match: {filters.strict}")
    print(f"Senders: {', '.join(filters.senders) if filters.senders else '(any)'}")
    print(f"Cleanup after upload: {filters.cleanup}")
    print(f"Attachment directory: {config.watch.attachment_dir}")


def _single_cycle(config: ListenerConfig) -> ListenerConfig:
    watch = config.watch.model_copy(update={"max_cycles": 1})
    return config.model_copy(update={"watch": watch})


if __name__ == "__main__":
    main()
