"""Mailbox polling loop emitting events to a listener."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from ..core.interfaces import MailboxListener, MailboxProvider
from ..core.models import IncomingMessage, PollReport

LOGGER = logging.getLogger(__name__)


class MessageParserProtocol(Protocol):
    """Minimal protocol implemented by message parsers."""

    def parse(self, uid: int, payload: bytes) -> IncomingMessage:
        """Convert raw RFC822 payload into an incoming message."""
        raise NotImplementedError


class MailboxWatcher:
    """Poll a mailbox for unseen mail and notify a listener.

    Every message is delivered with ``on_message`` before ``on_attachment``
    is called for each of its attachments, in order.
    """

    def __init__(
        self,
        mailbox: MailboxProvider,
        parser: MessageParserProtocol,
        listener: MailboxListener,
        *,
        poll_interval: float = 30.0,
        max_cycles: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        # pylint: disable=too-many-arguments
        """Initialise the watcher with mailbox, parser, and listener."""
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        self._mailbox = mailbox
        self._parser = parser
        self._listener = listener
        self._poll_interval = poll_interval
        self._max_cycles = max_cycles
        self._sleep = sleep
        self._stopped = False

    def stop(self) -> None:
        """Ask the watch loop to exit after the current cycle."""
        self._stopped = True

    def run(self) -> PollReport:
        """Connect and poll until stopped or ``max_cycles`` is reached.

        Returns the totals over all cycles.
        """
        self._stopped = False
        LOGGER.info("Mail listener starting on mailbox %s", self._mailbox.mailbox)
        self._mailbox.connect()
        self._listener.on_connected()
        cycles = 0
        totals = PollReport(messages=0, attachments=0)
        try:
            while not self._stopped:
                report = self.poll_once()
                totals.messages += report.messages
                totals.attachments += report.attachments
                totals.failed += report.failed
                cycles += 1
                if self._max_cycles is not None and cycles >= self._max_cycles:
                    break
                if not self._stopped:
                    self._sleep(self._poll_interval)
        finally:
            self._mailbox.close()
            self._listener.on_disconnected()
        LOGGER.info("Mail listener stopped after %s poll(s)", cycles)
        return totals

    def poll_once(self) -> PollReport:
        """Fetch unseen messages once and deliver their events."""
        messages = 0
        attachments = 0
        failed = 0
        for chunk in self._mailbox.fetch_unseen():
            try:
                message = self._parser.parse(chunk.uid, chunk.raw)
                self._listener.on_message(message)
                for attachment in message.attachments:
                    self._listener.on_attachment(attachment)
                    attachments += 1
            except Exception as exc:  # pylint: disable=broad-except
                LOGGER.error(
                    "Failed to process message UID %s: %s",
                    chunk.uid,
                    exc,
                    exc_info=True,
                )
                failed += 1
                continue
            messages += 1
        LOGGER.debug(
            "Poll completed: messages=%s, attachments=%s, failed=%s",
            messages,
            attachments,
            failed,
        )
        return PollReport(messages=messages, attachments=attachments, failed=failed)


__all__ = ["MailboxWatcher", "MessageParserProtocol"]
