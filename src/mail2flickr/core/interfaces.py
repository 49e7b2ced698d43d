"""Protocol interfaces for decoupling the watcher, dispatcher, and sink."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .models import Attachment, IncomingMessage, MessageChunk


class UploadError(RuntimeError):
    """Raised when the upload sink fails to store a photo."""


class MailboxProvider(Protocol):
    """Abstraction over an email source such as IMAP."""

    mailbox: str

    def connect(self) -> None:
        """Open the connection and select the mailbox."""
        raise NotImplementedError

    def fetch_unseen(self) -> Iterable[MessageChunk]:
        """Yield messages not yet flagged as seen."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any network resources."""
        raise NotImplementedError


class MailboxListener(Protocol):
    """Receiver of mailbox events.

    For each message, ``on_message`` is called before ``on_attachment`` is
    called for any of its attachments.
    """

    def on_connected(self) -> None:
        """Handle a successful connection to the mailbox."""
        raise NotImplementedError

    def on_disconnected(self) -> None:
        """Handle the connection being closed."""
        raise NotImplementedError

    def on_message(self, message: IncomingMessage) -> None:
        """Handle a newly arrived, parsed message."""
        raise NotImplementedError

    def on_attachment(self, attachment: Attachment) -> None:
        """Handle one attachment of the most recent message."""
        raise NotImplementedError


class UploadSink(Protocol):
    """Destination for qualifying image attachments."""

    def upload(self, path: Path, *, title: str | None = None) -> str:
        """Upload the file at ``path`` and return the remote photo id.

        Raises :class:`UploadError` on failure.
        """
        raise NotImplementedError


__all__ = [
    "MailboxListener",
    "MailboxProvider",
    "UploadError",
    "UploadSink",
]
