"""Tests for submitted image validation."""

from __future__ import annotations

import base64
import hashlib

import pytest

from facelogin.errors import InvalidImageInput
from facelogin.imaging.payload import parse_image_payload
from tests.fakes import image_data_url


def test_short_payload_is_rejected() -> None:
    with pytest.raises(InvalidImageInput):
        parse_image_payload("aGVsbG8hIQ")


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_payload_is_rejected(raw) -> None:
    with pytest.raises(InvalidImageInput):
        parse_image_payload(raw)


def test_data_url_without_base64_section_is_rejected() -> None:
    with pytest.raises(InvalidImageInput) as exc_info:
        parse_image_payload("data:," + "a" * 200)

    assert exc_info.value.status_code == 400


def test_non_image_bytes_are_rejected() -> None:
    encoded = base64.b64encode(b"not an image at all " * 20).decode("ascii")

    with pytest.raises(InvalidImageInput):
        parse_image_payload(encoded)


def test_broken_base64_is_rejected() -> None:
    with pytest.raises(InvalidImageInput):
        parse_image_payload("data:image/jpeg;base64," + "@@@@" * 50)


def test_bare_base64_gets_data_url_prefix() -> None:
    payload = parse_image_payload(image_data_url("JPEG", bare=True))

    assert payload.mime_type == "image/jpeg"
    assert payload.data_url.startswith("data:image/jpeg;base64,")
    assert payload.byte_size > 0


def test_detected_format_overrides_declared_mime() -> None:
    png = image_data_url("PNG").replace("data:image/png", "data:image/jpeg")

    payload = parse_image_payload(png)

    assert payload.mime_type == "image/png"
    assert payload.data_url.startswith("data:image/png;base64,")


def test_reference_is_full_digest_of_decoded_bytes() -> None:
    raw = image_data_url("JPEG")
    decoded = base64.b64decode(raw.split(",", 1)[1])

    payload = parse_image_payload(raw)

    assert payload.reference == f"sha256:{hashlib.sha256(decoded).hexdigest()}"
    assert raw.split(",", 1)[1] not in payload.reference
