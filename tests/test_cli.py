"""Tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest

from mail2flickr import cli
from mail2flickr.core.config import ListenerConfig


def test_info_prints_effective_settings(capsys: pytest.CaptureFixture[str]) -> None:
    config = ListenerConfig.model_validate(
        {
            "imap": {"host": "imap.example.com"},
            "filters": {"subjects": "upload,flickr", "strict": True},
        }
    )
    args = cli.build_parser().parse_args(["info"])

    status = cli.execute(args, config)

    output = capsys.readouterr().out
    assert status == 0
    assert "IMAP host: imap.example.com:993" in output
    assert "Subjects: upload, flickr" in output
    assert "Strict subject match: True" in output
    assert "Senders: (any)" in output


def test_poll_without_credentials_reports_configuration_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = ListenerConfig.model_validate({"watch": {"attachment_dir": tmp_path}})
    args = cli.build_parser().parse_args(["poll"])

    status = cli.execute(args, config)

    assert status == 2
    assert "Configuration error" in capsys.readouterr().out


def test_report_upload_formats_outcomes(capsys: pytest.CaptureFixture[str]) -> None:
    cli.report_upload(None, "4321")
    cli.report_upload(RuntimeError("quota exceeded"), None)

    output = capsys.readouterr().out
    assert "Uploaded photo. photoId=4321" in output
    assert "Upload failed: quota exceeded" in output
