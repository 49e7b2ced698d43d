"""Dispatch qualifying attachments to the upload sink."""

from __future__ import annotations

import logging

from ..core.config import CompletionCallback, FilterSettings
from ..core.interfaces import UploadError, UploadSink
from ..core.models import Attachment, IncomingMessage
from .filters import evaluate_message

LOGGER = logging.getLogger(__name__)


class UploadDispatcher:
    """React to mailbox events by uploading qualifying image attachments."""

    def __init__(
        self,
        sink: UploadSink,
        filters: FilterSettings,
        *,
        callback: CompletionCallback | None = None,
    ) -> None:
        """Initialise the dispatcher with a sink, filters, and callback."""
        self._sink = sink
        self._filters = filters
        self._callback = callback

    # Mailbox listener events ---------------------------------------------------
    def on_connected(self) -> None:
        """Log a successful mailbox connection."""
        LOGGER.info("IMAP connected")

    def on_disconnected(self) -> None:
        """Log a closed mailbox connection."""
        LOGGER.info("IMAP disconnected")

    def on_message(self, message: IncomingMessage) -> None:
        """Evaluate filters for a newly arrived message."""
        LOGGER.info(
            "Mail arrived with UID %s from %s", message.uid, message.first_sender
        )
        evaluate_message(message, self._filters)

    def on_attachment(self, attachment: Attachment) -> None:
        """Handle one attachment after its message has been evaluated."""
        self.handle_attachment(attachment)

    # Dispatch -------------------------------------------------------------------
    def handle_attachment(self, attachment: Attachment) -> None:
        """Upload ``attachment`` if it qualifies and is an image."""
        if not (attachment.qualifies and attachment.is_image):
            return

        LOGGER.info("Uploading %s", attachment.path)
        try:
            photo_id = self._sink.upload(attachment.path, title=attachment.filename)
        except UploadError as exc:
            LOGGER.error("Upload of %s failed: %s", attachment.path, exc)
            if self._callback is not None:
                self._callback(exc, None)
            return
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.error(
                "Unexpected error uploading %s: %s", attachment.path, exc, exc_info=True
            )
            if self._callback is not None:
                self._callback(exc, None)
            return

        LOGGER.info("Done uploading %s (photo id %s)", attachment.path, photo_id)
        if self._filters.cleanup:
            _remove_file(attachment)
        if self._callback is not None:
            self._callback(None, photo_id)


def _remove_file(attachment: Attachment) -> None:
    try:
        attachment.path.unlink()
    except OSError as exc:
        LOGGER.warning("Could not delete %s: %s", attachment.path, exc)
        return
    LOGGER.info("Deleted %s", attachment.path)


__all__ = ["UploadDispatcher"]
