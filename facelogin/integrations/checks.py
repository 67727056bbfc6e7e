"""Connectivity checks for the perception service and the identity backend."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from facelogin.identity.client import IdentityClient
from facelogin.perception.client import PerceptionClient


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:  # pragma: no cover - reported, not raised
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_perception() -> IntegrationCheckResult:
    """Ping the perception gateway and return the result."""

    async def _ping() -> bool:
        client = PerceptionClient()
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Perception",
        factory=_ping,
        success_message="Perception API is reachable.",
    )


async def check_identity() -> IntegrationCheckResult:
    """Ping the identity backend and return the result."""

    async def _ping() -> bool:
        client = IdentityClient()
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Identity",
        factory=_ping,
        success_message="Identity backend is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_perception(), check_identity()))
