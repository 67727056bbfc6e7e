"""Async wrapper around the identity backend admin endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from facelogin.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class IdentityRequestError(RuntimeError):
    """Raised when the identity backend responds with an error status code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass(slots=True)
class LoginLink:
    """One-time login artifact returned by ``generate_link``."""

    action_link: str | None
    properties: dict[str, Any] = field(default_factory=dict)


class IdentityClient:
    """Requests magic links from a GoTrue-compatible admin API."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        if not settings.identity_url or not settings.identity_service_key:
            raise RuntimeError("Identity backend is not configured.")

        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.identity_url.rstrip("/"),
            timeout=settings.identity_timeout,
            headers={
                "apikey": settings.identity_service_key,
                "Authorization": f"Bearer {settings.identity_service_key}",
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, json=json_body)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.TimeoutException as exc:
            raise IdentityRequestError("Identity backend timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise IdentityRequestError(
                f"Identity backend returned {exc.response.status_code}: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise IdentityRequestError(f"Identity backend request failed: {exc}") from exc

    async def generate_magic_link(self, email: str) -> LoginLink:
        """Ask for a single-use, time-boxed login link for ``email``."""

        payload: dict[str, Any] = {"type": "magiclink", "email": email}
        if self._settings.identity_redirect_url:
            payload["redirect_to"] = self._settings.identity_redirect_url
        body = await self._request_json("POST", "/admin/generate_link", json_body=payload)

        properties = body.get("properties")
        if not isinstance(properties, dict):
            properties = {
                key: body[key]
                for key in ("action_link", "hashed_token", "access_token", "refresh_token")
                if key in body
            }
        action_link = properties.get("action_link") or body.get("action_link")
        return LoginLink(action_link=action_link, properties=properties)

    async def redeem_link(self, action_link: str) -> str | None:
        """Open the link without following redirects and return the target location."""

        try:
            response = await self._client.get(action_link, follow_redirects=False)
        except httpx.HTTPError as exc:
            raise IdentityRequestError(f"Redeeming login link failed: {exc}") from exc
        if response.status_code >= 400:
            raise IdentityRequestError(
                f"Login link rejected with {response.status_code}",
                status_code=response.status_code,
            )
        return response.headers.get("location")

    async def ping(self) -> bool:
        """Return ``True`` when the identity health endpoint answers."""

        response = await self._client.get("/health")
        return response.is_success
