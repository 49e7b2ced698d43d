"""Core domain models shared by the watcher and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class Attachment:
    """An attachment materialised to local storage.

    ``qualifies`` is decided while the owning message is evaluated and read
    when the attachment itself is handled.
    """

    path: Path
    filename: str | None
    content_type: str | None
    qualifies: bool = False

    @property
    def is_image(self) -> bool:
        """Return ``True`` when the content type names an image."""
        return self.content_type is not None and "image" in self.content_type


@dataclass(slots=True)
class IncomingMessage:
    """A parsed message as delivered by the mailbox watcher."""

    uid: int
    senders: tuple[str, ...]
    subject: str | None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

    @property
    def first_sender(self) -> str | None:
        """Return the first sender address, if any."""
        return self.senders[0] if self.senders else None


@dataclass(slots=True)
class MessageChunk:
    """Raw IMAP payload paired with its UID."""

    uid: int
    raw: bytes


@dataclass(slots=True)
class PollReport:
    """Outcome summary for a single mailbox poll."""

    messages: int
    attachments: int
    failed: int = 0


__all__ = [
    "Attachment",
    "IncomingMessage",
    "MessageChunk",
    "PollReport",
]
