"""Ingestion pipeline components."""

from .parser import MessageParser
from .watcher import MailboxWatcher, MessageParserProtocol

__all__ = ["MailboxWatcher", "MessageParser", "MessageParserProtocol"]
