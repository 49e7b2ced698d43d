"""Filtering and upload dispatch of mailbox attachments."""

from .dispatcher import UploadDispatcher
from .filters import evaluate_message, sender_allowed, subject_matches

__all__ = [
    "UploadDispatcher",
    "evaluate_message",
    "sender_allowed",
    "subject_matches",
]
