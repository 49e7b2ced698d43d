"""Parse raw RFC822 messages and materialise their attachments."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses
from pathlib import Path

from ..core.models import Attachment, IncomingMessage

LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class MessageParser:
    """Convert raw email payloads into :class:`IncomingMessage` objects.

    Attachment parts are written below ``attachment_dir`` so that the upload
    sink can read them from disk.
    """

    def __init__(self, attachment_dir: Path) -> None:
        """Prepare the parser and the directory attachments are written to."""
        self._parser = BytesParser(policy=policy.default)
        self._attachment_dir = attachment_dir

    def parse(self, uid: int, payload: bytes) -> IncomingMessage:
        """Parse raw RFC822 bytes into an :class:`IncomingMessage`."""
        message = self._parser.parsebytes(payload)
        subject = message.get("Subject")
        senders = tuple(_extract_addresses(message.get_all("From", [])))
        attachments = tuple(self._materialise_attachments(uid, message))
        return IncomingMessage(
            uid=uid,
            senders=senders,
            subject=str(subject) if subject is not None else None,
            attachments=attachments,
        )

    def _materialise_attachments(
        self, uid: int, message: EmailMessage
    ) -> Iterator[Attachment]:
        self._attachment_dir.mkdir(parents=True, exist_ok=True)
        for index, part in enumerate(_file_parts(message)):
            payload = part.get_payload(decode=True) or b""
            filename = part.get_filename()
            target = self._attachment_dir / _local_name(uid, index, filename)
            target.write_bytes(payload)
            LOGGER.debug(
                "Stored attachment %s of UID %s at %s (%s bytes)",
                filename,
                uid,
                target,
                len(payload),
            )
            yield Attachment(
                path=target,
                filename=filename,
                content_type=part.get_content_type(),
            )


def _file_parts(message: EmailMessage) -> Iterator[EmailMessage]:
    """Yield leaf parts carrying files, at any nesting depth.

    Text parts without a filename are message bodies and are skipped.
    """
    for part in message.walk():
        if part.is_multipart():
            continue
        if part.get_filename() or part.get_content_maintype() != "text":
            yield part


def _extract_addresses(headers: Iterable[str]) -> Iterable[str]:
    for _, email_address in getaddresses([str(header) for header in headers]):
        if email_address:
            yield email_address


def _local_name(uid: int, index: int, filename: str | None) -> str:
    base = Path(filename).name if filename else "attachment"
    safe = _UNSAFE_CHARS.sub("_", base).strip("._") or "attachment"
    return f"{uid}-{index}-{safe}"


__all__ = ["MessageParser"]
