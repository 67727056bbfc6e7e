"""Validation and normalisation of submitted face images."""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from facelogin.errors import InvalidImageInput

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "GIF", "BMP"})


@dataclass(slots=True, frozen=True)
class ImagePayload:
    """A submitted image that decoded to a supported encoding."""

    data_url: str
    mime_type: str
    byte_size: int
    digest: str

    @property
    def reference(self) -> str:
        """Provenance reference that never embeds the image itself."""

        return f"sha256:{self.digest}"


def _split_data_url(raw: str) -> tuple[str | None, str]:
    if not raw.startswith("data:"):
        return None, raw
    header, sep, encoded = raw.partition(",")
    if not sep or ";base64" not in header or not encoded:
        logger.warning("Rejected data URL with unsupported header: %s", header[:50])
        raise InvalidImageInput("تنسيق الصورة غير صحيح")
    return header[len("data:"):].split(";", 1)[0], encoded


def _detect_format(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as exc:
        raise InvalidImageInput() from exc
    if image_format not in SUPPORTED_FORMATS:
        raise InvalidImageInput("تنسيق الصورة غير مدعوم")
    return image_format


def parse_image_payload(raw: str | None, *, min_length: int = 100) -> ImagePayload:
    """
    Validate raw base64 or a data URL and return a normalised payload.

    Runs locally and never contacts the perception service, so rejected
    payloads cost nothing upstream.
    """

    if not raw or not isinstance(raw, str):
        raise InvalidImageInput("لم يتم إرسال صورة")

    candidate = raw.strip()
    if len(candidate) < min_length:
        logger.warning("Rejected image payload of length %d", len(candidate))
        raise InvalidImageInput()

    declared_mime, encoded = _split_data_url(candidate)
    encoded = "".join(encoded.split())
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageInput() from exc

    image_format = _detect_format(data)
    mime_type = Image.MIME.get(image_format, f"image/{image_format.lower()}")
    if declared_mime and declared_mime != mime_type:
        logger.info("Declared MIME %s differs from detected %s", declared_mime, mime_type)

    return ImagePayload(
        data_url=f"data:{mime_type};base64,{encoded}",
        mime_type=mime_type,
        byte_size=len(data),
        digest=hashlib.sha256(data).hexdigest(),
    )
