"""Generation of textual face descriptors."""

from __future__ import annotations

import logging

from facelogin.errors import PerceptionServiceError
from facelogin.imaging.payload import ImagePayload
from facelogin.perception.client import PerceptionClient
from facelogin.perception.prompts import DESCRIPTION_PROMPT, DESCRIPTION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class DescriptorGenerator:
    """Produces a fixed-structure description of the face in an image."""

    def __init__(self, client: PerceptionClient, *, max_tokens: int = 1000) -> None:
        self._client = client
        self._max_tokens = max_tokens

    async def describe(self, image: ImagePayload) -> str:
        """
        Return a non-empty descriptor for an image already known to hold a face.

        There is no local fallback: if the model cannot describe the face the
        attempt fails with ``PerceptionServiceError``.
        """

        description = await self._client.complete(
            DESCRIPTION_PROMPT,
            image_url=image.data_url,
            system_prompt=DESCRIPTION_SYSTEM_PROMPT,
            max_tokens=self._max_tokens,
            temperature=0.3,
        )
        if not description.strip():
            raise PerceptionServiceError("لم يتم توليد وصف للوجه")
        logger.info("Generated face descriptor (%d chars)", len(description))
        return description
