"""IMAP transport adapter providing mailbox access."""

from __future__ import annotations

import imaplib
import logging
import ssl
from collections.abc import Iterator

from ..core.config import ImapSettings
from ..core.interfaces import MailboxProvider
from ..core.models import MessageChunk

LOGGER = logging.getLogger(__name__)


class ImapError(RuntimeError):
    """Wrap low level IMAP errors with additional context."""


class ImapClient(MailboxProvider):
    """Thin wrapper around ``imaplib`` fetching unseen messages."""

    def __init__(self, settings: ImapSettings) -> None:
        """Initialise the client with configuration settings."""
        self._settings = settings
        self._connection: imaplib.IMAP4 | imaplib.IMAP4_SSL | None = None
        self.mailbox = settings.mailbox

    # Public API ---------------------------------------------------------------
    def connect(self) -> None:
        """Establish IMAP connection and select the configured mailbox."""
        if self._connection is not None:
            return

        username = self._settings.username
        password = self._settings.password
        if username is None or password is None:
            raise ImapError("IMAP credentials are not configured")

        try:
            if self._settings.use_ssl:
                LOGGER.debug(
                    "Connecting to IMAP host %s:%s via SSL",
                    self._settings.host,
                    self._settings.port,
                )
                connection: imaplib.IMAP4 | imaplib.IMAP4_SSL = imaplib.IMAP4_SSL(
                    self._settings.host,
                    self._settings.port,
                    ssl_context=ssl.create_default_context(),
                )
            else:
                LOGGER.debug(
                    "Connecting to IMAP host %s:%s without SSL",
                    self._settings.host,
                    self._settings.port,
                )
                connection = imaplib.IMAP4(self._settings.host, self._settings.port)

            LOGGER.debug("Authenticating as %s", username)
            connection.login(username, password)
            status, _ = connection.select(self.mailbox)
            if status != "OK":
                raise ImapError(f"Unable to select mailbox '{self.mailbox}'")
            self._connection = connection
        except (imaplib.IMAP4.error, OSError) as exc:  # pragma: no cover - network dependent
            raise ImapError("Failed to connect to IMAP server") from exc

    def fetch_unseen(self) -> Iterator[MessageChunk]:
        """Yield unseen messages in ascending UID order."""
        connection = self._require_connection()
        status, data = connection.uid("SEARCH", None, "UNSEEN")  # type: ignore[arg-type]
        if status != "OK":
            raise ImapError("Failed to search for unseen messages")

        raw_ids = data[0].split() if data and data[0] else []
        if not raw_ids:
            LOGGER.debug("No unseen messages found")
            return

        query = "(RFC822)" if self._settings.mark_seen else "(BODY.PEEK[])"
        for uid_bytes in sorted(raw_ids, key=int):
            uid_str = uid_bytes.decode()
            LOGGER.debug("Fetching %s for UID %s", query, uid_str)
            try:
                status_fetch, fetch_data = connection.uid("FETCH", uid_str, query)
            except imaplib.IMAP4.error as exc:  # pragma: no cover - network dependent
                raise ImapError(f"IMAP error while fetching UID {uid_str}") from exc
            if status_fetch != "OK":
                raise ImapError(f"Failed to fetch message UID {uid_str}")
            payload = _extract_payload(fetch_data)
            if payload is None:
                LOGGER.warning("No message payload returned for UID %s", uid_str)
                continue
            yield MessageChunk(uid=int(uid_str), raw=payload)

    def close(self) -> None:
        """Terminate the IMAP session cleanly."""
        if self._connection is None:
            return
        try:
            LOGGER.debug("Closing IMAP connection")
            self._connection.close()
        except imaplib.IMAP4.error:  # pragma: no cover - depends on server state
            LOGGER.debug("IMAP close raised; continuing with logout")
        finally:
            try:
                self._connection.logout()
            except imaplib.IMAP4.error:  # pragma: no cover
                LOGGER.debug("IMAP logout raised; suppressing during shutdown")
            self._connection = None

    # Internal helpers ---------------------------------------------------------
    def _require_connection(self) -> imaplib.IMAP4 | imaplib.IMAP4_SSL:
        if self._connection is None:
            raise ImapError("IMAP connection has not been established")
        return self._connection


def _extract_payload(fetch_data: list[tuple[bytes, bytes] | bytes]) -> bytes | None:
    """Extract the message payload from ``imaplib`` response chunks."""
    for entry in fetch_data:
        if isinstance(entry, tuple) and len(entry) == 2:
            return entry[1]
    return None


__all__ = [
    "ImapClient",
    "ImapError",
]
