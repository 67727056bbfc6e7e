"""Presence check: does the image show exactly one clear face."""

from __future__ import annotations

import logging
import re

from facelogin.imaging.payload import ImagePayload
from facelogin.perception.client import PerceptionClient
from facelogin.perception.prompts import PRESENCE_PROMPT

logger = logging.getLogger(__name__)

# The answer must open with an affirmative; anything else reads as "no".
_AFFIRMATIVE = re.compile(r"^\W*(yes|نعم)\b", re.IGNORECASE)


def is_affirmative(answer: str) -> bool:
    """Return ``True`` only when ``answer`` opens with "yes" (or "نعم")."""

    return bool(_AFFIRMATIVE.match(answer))


class PresenceVerifier:
    """Asks the perception model for a binary face-present decision."""

    def __init__(self, client: PerceptionClient) -> None:
        self._client = client

    async def detect_face(self, image: ImagePayload) -> bool:
        answer = await self._client.complete(PRESENCE_PROMPT, image_url=image.data_url)
        detected = is_affirmative(answer)
        logger.info("Face presence answer=%r detected=%s", answer[:20], detected)
        return detected
