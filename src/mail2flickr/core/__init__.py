"""Core configuration, logging, models, and interfaces."""

from .config import (
    CompletionCallback,
    ConfigurationError,
    FilterSettings,
    FlickrSettings,
    ImapSettings,
    ListenerConfig,
    LoggingSettings,
    WatchSettings,
    load_listener_config,
)
from .interfaces import MailboxListener, MailboxProvider, UploadError, UploadSink
from .logging import configure_logging
from .models import Attachment, IncomingMessage, MessageChunk, PollReport

__all__ = [
    "Attachment",
    "CompletionCallback",
    "ConfigurationError",
    "FilterSettings",
    "FlickrSettings",
    "ImapSettings",
    "IncomingMessage",
    "ListenerConfig",
    "LoggingSettings",
    "MailboxListener",
    "MailboxProvider",
    "MessageChunk",
    "PollReport",
    "UploadError",
    "UploadSink",
    "WatchSettings",
    "configure_logging",
    "load_listener_config",
]
