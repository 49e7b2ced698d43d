"""Sender and subject filters applied to incoming messages."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.config import FilterSettings
from ..core.models import IncomingMessage

LOGGER = logging.getLogger(__name__)


def subject_matches(subject: str, keyword: str, *, strict: bool = False) -> bool:
    """Return whether ``subject`` matches ``keyword``.

    Strict matching requires exact equality; otherwise the keyword must occur
    anywhere in the subject, ignoring case.
    """
    if strict:
        return subject == keyword
    return keyword.lower() in subject.lower()


def sender_allowed(sender: str | None, allowed: Sequence[str] | None) -> bool:
    """Return whether ``sender`` passes the allow-list.

    An unset allow-list admits everyone. Otherwise the address must contain
    at least one entry, ignoring case.
    """
    if not allowed:
        return True
    if not sender:
        return False
    lowered = sender.lower()
    return any(entry.lower() in lowered for entry in allowed)


def evaluate_message(message: IncomingMessage, settings: FilterSettings) -> None:
    """Flag the attachments of ``message`` that qualify for upload.

    Attachments that do not qualify keep their current flag.
    """
    if not sender_allowed(message.first_sender, settings.senders):
        LOGGER.debug(
            "Sender %s of UID %s is not allowed; skipping attachments",
            message.first_sender,
            message.uid,
        )
        return

    if settings.subjects:
        subject = message.subject
        if not subject or not any(
            subject_matches(subject, keyword, strict=settings.strict)
            for keyword in settings.subjects
        ):
            LOGGER.debug(
                "Subject %r of UID %s matches no keyword", subject, message.uid
            )
            return

    for attachment in message.attachments:
        attachment.qualifies = True
    LOGGER.debug(
        "UID %s: %s attachment(s) qualify for upload",
        message.uid,
        len(message.attachments),
    )


__all__ = ["evaluate_message", "sender_allowed", "subject_matches"]
