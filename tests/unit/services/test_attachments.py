"""Tests for attachment encoding and size limits."""

import logging

import pytest

from intake_bridge.core.models import Attachment
from intake_bridge.services.attachments import (
    collect_attachments,
    encode_attachment,
    normalize_attachment,
    strip_data_uri,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("data:image/png;base64,AAAA", "AAAA"),
        ("data:application/pdf;base64,JVBERi0=", "JVBERi0="),
        ("AAAA", "AAAA"),
    ],
)
def test_strip_data_uri(raw, expected):
    assert strip_data_uri(raw) == expected


def test_normalize_keeps_given_name_and_type():
    att = normalize_attachment(
        Attachment(name="kitchen.png", type="image/png", data="data:image/png;base64,QUJD")
    )
    assert (att.name, att.mime_type, att.data) == ("kitchen.png", "image/png", "QUJD")


def test_encode_attachment_base64_and_default_type():
    att = encode_attachment("notes.bin", None, b"ABC")
    assert att.data == "QUJD"
    assert att.mime_type == "application/octet-stream"


def test_collect_skips_oversized_and_keeps_the_rest(tmp_path, caplog):
    small = tmp_path / "small.png"
    small.write_bytes(b"\x89PNG" + b"0" * 10)
    big = tmp_path / "big.jpg"
    big.write_bytes(b"0" * 101)

    with caplog.at_level(logging.WARNING):
        result = collect_attachments([small, big], max_bytes=100)

    assert [a.name for a in result] == ["small.png"]
    assert result[0].mime_type == "image/png"
    assert "big.jpg" in caplog.text


def test_collect_all_oversized_yields_empty_list(tmp_path):
    big = tmp_path / "big.jpg"
    big.write_bytes(b"0" * 50)
    assert collect_attachments([str(big)], max_bytes=10) == []


def test_file_exactly_at_limit_is_kept(tmp_path):
    edge = tmp_path / "edge.txt"
    edge.write_bytes(b"x" * 10)
    assert len(collect_attachments([edge], max_bytes=10)) == 1
