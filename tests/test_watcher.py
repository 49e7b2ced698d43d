"""Tests for the mailbox polling loop."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from mail2flickr.core.models import Attachment, IncomingMessage, MessageChunk
from mail2flickr.ingestion import MailboxWatcher


class DummyMailbox:
    """Mailbox provider returning predetermined chunks once."""

    def __init__(self, chunks: Iterable[MessageChunk]) -> None:
        self.mailbox = "INBOX"
        self._chunks = list(chunks)
        self.events: list[str] = []

    def connect(self) -> None:
        self.events.append("connect")

    def fetch_unseen(self) -> Iterable[MessageChunk]:
        chunks, self._chunks = self._chunks, []
        return chunks

    def close(self) -> None:
        self.events.append("close")


class StubParser:
    """Parser producing one image and one document per message."""

    def __init__(self, broken_uids: set[int] | None = None) -> None:
        self._broken = broken_uids or set()

    def parse(self, uid: int, payload: bytes) -> IncomingMessage:
        if uid in self._broken:
            raise ValueError(f"cannot parse {uid}")
        return IncomingMessage(
            uid=uid,
            senders=("a@x.com",),
            subject=payload.decode(),
            attachments=(
                Attachment(Path(f"{uid}-0.jpg"), "photo.jpg", "image/jpeg"),
                Attachment(Path(f"{uid}-1.pdf"), "doc.pdf", "application/pdf"),
            ),
        )


class RecordingListener:
    """Listener capturing the order of delivered events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_connected(self) -> None:
        self.events.append(("connected", None))

    def on_disconnected(self) -> None:
        self.events.append(("disconnected", None))

    def on_message(self, message: IncomingMessage) -> None:
        self.events.append(("message", message.uid))

    def on_attachment(self, attachment: Attachment) -> None:
        self.events.append(("attachment", str(attachment.path)))


def test_poll_once_delivers_message_before_its_attachments() -> None:
    mailbox = DummyMailbox(
        [MessageChunk(uid=1, raw=b"first"), MessageChunk(uid=2, raw=b"second")]
    )
    listener = RecordingListener()
    watcher = MailboxWatcher(mailbox, StubParser(), listener)

    report = watcher.poll_once()

    assert report.messages == 2
    assert report.attachments == 4
    assert report.failed == 0
    assert listener.events == [
        ("message", 1),
        ("attachment", "1-0.jpg"),
        ("attachment", "1-1.pdf"),
        ("message", 2),
        ("attachment", "2-0.jpg"),
        ("attachment", "2-1.pdf"),
    ]


def test_poll_once_continues_after_failing_message() -> None:
    mailbox = DummyMailbox(
        [MessageChunk(uid=1, raw=b"bad"), MessageChunk(uid=2, raw=b"good")]
    )
    listener = RecordingListener()
    watcher = MailboxWatcher(mailbox, StubParser(broken_uids={1}), listener)

    report = watcher.poll_once()

    assert report.messages == 1
    assert report.failed == 1
    assert listener.events[0] == ("message", 2)


def test_run_connects_polls_and_disconnects() -> None:
    mailbox = DummyMailbox([MessageChunk(uid=3, raw=b"hello")])
    listener = RecordingListener()
    sleeps: list[float] = []
    watcher = MailboxWatcher(
        mailbox,
        StubParser(),
        listener,
        poll_interval=5,
        max_cycles=2,
        sleep=sleeps.append,
    )

    report = watcher.run()

    assert report.messages == 1
    assert report.attachments == 2
    assert sleeps == [5]
    assert mailbox.events == ["connect", "close"]
    assert listener.events[0] == ("connected", None)
    assert listener.events[-1] == ("disconnected", None)


def test_stop_ends_loop_after_current_cycle() -> None:
    mailbox = DummyMailbox([MessageChunk(uid=4, raw=b"stop")])
    sleeps: list[float] = []

    class StoppingListener(RecordingListener):
        def on_message(self, message: IncomingMessage) -> None:
            super().on_message(message)
            watcher.stop()

    listener = StoppingListener()
    watcher = MailboxWatcher(mailbox, StubParser(), listener, sleep=sleeps.append)

    watcher.run()

    assert sleeps == []
    assert listener.events[-1] == ("disconnected", None)
