"""Client for the OpenAI-compatible perception gateway."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import AsyncOpenAI, OpenAIError

from facelogin.config.settings import Settings, get_settings
from facelogin.errors import PerceptionServiceError

logger = logging.getLogger(__name__)


class PerceptionClient:
    """Thin client that sends text and image prompts to the chat model."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        if not settings.perception_api_key:
            raise RuntimeError("Perception API key is not configured.")

        self._settings = settings
        self._client = AsyncOpenAI(
            api_key=settings.perception_api_key,
            base_url=settings.perception_base_url.rstrip("/"),
            timeout=settings.perception_timeout,
            max_retries=0,
            http_client=httpx.AsyncClient(transport=transport) if transport else None,
        )

    async def complete(
        self,
        prompt: str,
        *,
        image_url: str | None = None,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Send one prompt (optionally with an image) and return the text answer."""

        if image_url is None:
            user_content: Any = prompt
        else:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_content})

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.perception_model,
                messages=messages,
                **kwargs,
            )
        except OpenAIError as exc:
            logger.error("Perception request failed: %s", exc)
            raise PerceptionServiceError() from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            logger.error("Perception response has no choices")
            raise PerceptionServiceError()
        message = getattr(choices[0], "message", None)
        if message is None:
            logger.error("Perception response choice has no message")
            raise PerceptionServiceError()
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.error("Perception response has empty content")
            raise PerceptionServiceError()
        return content.strip()

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._client.models.list()
        return bool(models.data)

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()
