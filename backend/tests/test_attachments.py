# tests/test_attachments.py
from __future__ import annotations

import base64

import pytest

from taskboard.core.attachments import inline_payload_size, validate_attachment
from taskboard.core.errors import ValidationError

LIMIT = 700 * 1024


def data_url(n_bytes: int) -> str:
    return "data:application/pdf;base64," + base64.b64encode(b"x" * n_bytes).decode()


def test_inline_size_is_decoded_size():
    assert inline_payload_size(data_url(1000)) == 1000
    assert inline_payload_size(base64.b64encode(b"abc").decode()) == 3


def test_file_at_the_limit_is_accepted():
    value, kind = validate_attachment("file", data_url(LIMIT), max_inline_bytes=LIMIT)
    assert kind == "file"
    assert value.startswith("data:")


def test_file_over_the_limit_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_attachment("file", data_url(LIMIT + 1), max_inline_bytes=LIMIT)
    assert exc.value.code == "attachment_too_large"
    assert exc.value.extra["limit"] == LIMIT


def test_links_are_not_size_checked():
    link = "https://example.com/" + "a" * (LIMIT + 10)
    assert validate_attachment("link", link, max_inline_bytes=LIMIT) == (link, "link")


def test_link_must_be_http():
    with pytest.raises(ValidationError):
        validate_attachment("link", "ftp://example.com/file", max_inline_bytes=LIMIT)


def test_nothing_attached():
    assert validate_attachment(None, None, max_inline_bytes=LIMIT) == (None, None)
    assert validate_attachment("file", "   ", max_inline_bytes=LIMIT) == (None, None)


def test_garbage_base64_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_attachment("file", "data:text/plain;base64,@@@", max_inline_bytes=LIMIT)
    assert exc.value.code == "invalid_attachment"
