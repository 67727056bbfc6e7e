"""Perception interface consumed by the verification pipeline."""

from __future__ import annotations

from typing import Protocol

from facelogin.imaging.payload import ImagePayload
from facelogin.perception.client import PerceptionClient
from facelogin.perception.describer import DescriptorGenerator
from facelogin.perception.matcher import PairwiseMatcher
from facelogin.perception.presence import PresenceVerifier


class PerceptionService(Protocol):
    """Everything the matching policy needs from a perception backend."""

    async def detect_face(self, image: ImagePayload) -> bool: ...

    async def describe(self, image: ImagePayload) -> str: ...

    async def compare(self, submitted: str, stored: str) -> int: ...


class ChatPerceptionService:
    """Perception backed by a multimodal chat model."""

    def __init__(self, client: PerceptionClient) -> None:
        self._client = client
        self._presence = PresenceVerifier(client)
        self._describer = DescriptorGenerator(client)
        self._matcher = PairwiseMatcher(client)

    async def detect_face(self, image: ImagePayload) -> bool:
        return await self._presence.detect_face(image)

    async def describe(self, image: ImagePayload) -> str:
        return await self._describer.describe(image)

    async def compare(self, submitted: str, stored: str) -> int:
        return await self._matcher.compare(submitted, stored)

    async def close(self) -> None:
        await self._client.close()
