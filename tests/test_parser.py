"""Tests for RFC822 parsing into incoming messages."""

from __future__ import annotations

from email.message import EmailMessage
from pathlib import Path

from mail2flickr.ingestion import MessageParser

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-data"


def _build_payload() -> bytes:
    message = EmailMessage()
    message["From"] = "Alice Example <A@X.com>"
    message["To"] = "photos@example.com"
    message["Subject"] = "please Upload this"
    message.set_content("See attached.")
    message.add_attachment(
        PNG_BYTES, maintype="image", subtype="png", filename="holiday.png"
    )
    message.add_attachment(
        b"%PDF-1.4", maintype="application", subtype="pdf", filename="../notes.pdf"
    )
    return message.as_bytes()


def test_parser_extracts_sender_subject_and_attachments(tmp_path: Path) -> None:
    parser = MessageParser(tmp_path / "attachments")

    message = parser.parse(uid=42, payload=_build_payload())

    assert message.uid == 42
    assert message.senders == ("A@X.com",)
    assert message.first_sender == "A@X.com"
    assert message.subject == "please Upload this"
    assert len(message.attachments) == 2

    image, document = message.attachments
    assert image.filename == "holiday.png"
    assert image.content_type == "image/png"
    assert image.is_image
    assert image.qualifies is False
    assert image.path == tmp_path / "attachments" / "42-0-holiday.png"
    assert image.path.read_bytes() == PNG_BYTES

    assert document.content_type == "application/pdf"
    assert not document.is_image
    assert document.path.parent == tmp_path / "attachments"
    assert document.path.read_bytes() == b"%PDF-1.4"


def test_parser_handles_message_without_attachments(tmp_path: Path) -> None:
    message = EmailMessage()
    message["From"] = "b@x.com"
    message.set_content("No subject, no attachments.")

    parsed = MessageParser(tmp_path).parse(uid=7, payload=message.as_bytes())

    assert parsed.senders == ("b@x.com",)
    assert parsed.subject is None
    assert parsed.attachments == ()


def test_parser_finds_images_nested_in_alternative_related_layout(
    tmp_path: Path,
) -> None:
    message = EmailMessage()
    message["From"] = "a@x.com"
    message["Subject"] = "upload"
    message.set_content("Plain body.")
    message.add_alternative("<p>HTML body <img src='cid:p1'></p>", subtype="html")
    html_part = message.get_payload()[1]
    html_part.add_related(
        PNG_BYTES, maintype="image", subtype="png", cid="<p1>", filename="p.png"
    )
    assert message.get_content_type() == "multipart/alternative"

    parsed = MessageParser(tmp_path).parse(uid=1, payload=message.as_bytes())

    assert len(parsed.attachments) == 1
    image = parsed.attachments[0]
    assert image.filename == "p.png"
    assert image.content_type == "image/png"
    assert image.path == tmp_path / "1-0-p.png"
    assert image.path.read_bytes() == PNG_BYTES


def test_parser_materialises_single_part_image_message(tmp_path: Path) -> None:
    message = EmailMessage()
    message["From"] = "a@x.com"
    message["Subject"] = "upload"
    message.set_content(
        b"jpeg-bytes", maintype="image", subtype="jpeg", filename="solo.jpg"
    )

    parsed = MessageParser(tmp_path).parse(uid=9, payload=message.as_bytes())

    assert len(parsed.attachments) == 1
    image = parsed.attachments[0]
    assert image.content_type == "image/jpeg"
    assert image.path == tmp_path / "9-0-solo.jpg"
    assert image.path.read_bytes() == b"jpeg-bytes"
