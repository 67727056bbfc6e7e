"""Tests for the identity backend client using an in-process transport."""

from __future__ import annotations

import json

import httpx
import pytest

from facelogin.identity.client import IdentityClient, IdentityRequestError


def _client(handler) -> IdentityClient:
    return IdentityClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_generate_magic_link_posts_admin_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "action_link": "https://identity.test/auth/v1/verify?token=abc&type=magiclink",
                "hashed_token": "abc",
                "email": "a1@police.test",
            },
        )

    client = _client(handler)
    try:
        link = await client.generate_magic_link("a1@police.test")
    finally:
        await client.close()

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/auth/v1/admin/generate_link"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"
    assert json.loads(request.content) == {"type": "magiclink", "email": "a1@police.test"}
    assert link.action_link.endswith("type=magiclink")
    assert link.properties["hashed_token"] == "abc"


@pytest.mark.asyncio
async def test_generate_magic_link_reads_nested_properties() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "user": {"id": "A1"},
                "properties": {
                    "action_link": "https://identity.test/verify?token=x",
                    "access_token": "a",
                    "refresh_token": "r",
                },
            },
        )

    client = _client(handler)
    try:
        link = await client.generate_magic_link("a1@police.test")
    finally:
        await client.close()

    assert link.action_link == "https://identity.test/verify?token=x"
    assert link.properties["refresh_token"] == "r"


@pytest.mark.asyncio
async def test_generate_magic_link_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"msg": "User not found"})

    client = _client(handler)
    try:
        with pytest.raises(IdentityRequestError) as exc_info:
            await client.generate_magic_link("nobody@police.test")
    finally:
        await client.close()

    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_redeem_link_returns_redirect_location() -> None:
    target = "https://console.test/#access_token=abc&refresh_token=def&type=magiclink"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(303, headers={"location": target})

    client = _client(handler)
    try:
        location = await client.redeem_link("https://identity.test/auth/v1/verify?token=abc")
    finally:
        await client.close()

    assert location == target


@pytest.mark.asyncio
async def test_redeem_link_rejects_expired_link() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"msg": "Token has expired"})

    client = _client(handler)
    try:
        with pytest.raises(IdentityRequestError):
            await client.redeem_link("https://identity.test/auth/v1/verify?token=old")
    finally:
        await client.close()


def test_client_requires_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    from facelogin.config.settings import get_settings

    monkeypatch.setenv("IDENTITY_URL", "")
    get_settings.cache_clear()

    with pytest.raises(RuntimeError):
        IdentityClient()
