"""Per-request wiring of external clients and services."""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, HTTPException, Request, status

from facelogin.identity.client import IdentityClient
from facelogin.perception.client import PerceptionClient
from facelogin.perception.service import ChatPerceptionService, PerceptionService
from facelogin.services.enrollment import EnrollmentService
from facelogin.services.session import IdentityBackend
from facelogin.services.verification import FaceLoginVerifier


async def get_perception() -> AsyncIterator[PerceptionService]:
    try:
        service = ChatPerceptionService(PerceptionClient())
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    try:
        yield service
    finally:
        await service.close()


async def get_identity() -> AsyncIterator[IdentityBackend]:
    try:
        client = IdentityClient()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    try:
        yield client
    finally:
        await client.close()


def get_verifier(
    perception: PerceptionService = Depends(get_perception),
    identity: IdentityBackend = Depends(get_identity),
) -> FaceLoginVerifier:
    return FaceLoginVerifier(perception, identity)


def get_enrollment(
    perception: PerceptionService = Depends(get_perception),
) -> EnrollmentService:
    return EnrollmentService(perception)


def client_ip(request: Request) -> str:
    """Resolve the caller address, trusting the first proxy hop."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
