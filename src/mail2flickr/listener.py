"""Entry point wiring the mailbox watcher to the Flickr upload dispatcher."""

from __future__ import annotations

import logging

from .core.config import ListenerConfig
from .core.interfaces import MailboxProvider, UploadSink
from .dispatch import UploadDispatcher
from .ingestion import MailboxWatcher, MessageParser
from .transport import ImapClient
from .upload import FlickrUploader

LOGGER = logging.getLogger(__name__)


def build_listener(
    config: ListenerConfig,
    *,
    mailbox: MailboxProvider | None = None,
    sink: UploadSink | None = None,
) -> MailboxWatcher:
    """Assemble an unstarted watcher for ``config``.

    ``mailbox`` and ``sink`` replace the IMAP client and the Flickr uploader
    when given.
    """
    if mailbox is None or sink is None:
        config.require_credentials()
    dispatcher = UploadDispatcher(
        sink if sink is not None else FlickrUploader(config.flickr),
        config.filters,
        callback=config.callback,
    )
    return MailboxWatcher(
        mailbox if mailbox is not None else ImapClient(config.imap),
        MessageParser(config.watch.attachment_dir),
        dispatcher,
        poll_interval=config.watch.poll_interval_seconds,
        max_cycles=config.watch.max_cycles,
    )


def create_listener(config: ListenerConfig) -> None:
    """Watch the configured mailbox and upload matching image attachments.

    Results are reported only through ``config.callback``, which receives
    ``(None, photo_id)`` after each successful upload and ``(error, None)``
    after a failed one.
    """
    watcher = build_listener(config)
    LOGGER.info("Mail listener start")
    watcher.run()


__all__ = ["build_listener", "create_listener"]
