"""Face login HTTP routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.api.auth import InternalAuthDependency
from facelogin.api.dependencies import client_ip, get_enrollment, get_verifier
from facelogin.api.schemas import (
    DisableRequest,
    DisableResponse,
    EnrollRequest,
    EnrollResponse,
    ErrorResponse,
    VerifyRequest,
    VerifyResponse,
)
from facelogin.db.session import get_session
from facelogin.services.enrollment import EnrollmentService
from facelogin.services.verification import AttemptContext, FaceLoginVerifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/face-login", tags=["face-login"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.post("/verify", response_model=VerifyResponse, responses=_ERROR_RESPONSES)
async def verify_face_login(
    payload: VerifyRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    verifier: FaceLoginVerifier = Depends(get_verifier),
) -> VerifyResponse:
    """Match the submitted photo against enrolled faces and issue a session."""

    context = AttemptContext(
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    result = await verifier.verify(session, raw_image=payload.image_base64, context=context)
    return VerifyResponse(
        message="تم التحقق من الوجه بنجاح",
        similarity=result.similarity_score,
        email=result.login_identifier,
        userId=result.account_id,
        accessToken=result.access_token,
        refreshToken=result.refresh_token,
    )


@router.post(
    "/enroll",
    response_model=EnrollResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[InternalAuthDependency],
)
async def enroll_face(
    payload: EnrollRequest,
    session: AsyncSession = Depends(get_session),
    enrollment: EnrollmentService = Depends(get_enrollment),
) -> EnrollResponse:
    record = await enrollment.enroll(
        session, account_id=payload.user_id, raw_image=payload.image_base64
    )
    return EnrollResponse(
        message="تم تسجيل الوجه بنجاح",
        userId=payload.user_id,
        descriptorId=record.id,
    )


@router.post(
    "/disable",
    response_model=DisableResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[InternalAuthDependency],
)
async def disable_face_login(
    payload: DisableRequest,
    session: AsyncSession = Depends(get_session),
    enrollment: EnrollmentService = Depends(get_enrollment),
) -> DisableResponse:
    deactivated = await enrollment.disable(session, account_id=payload.user_id)
    return DisableResponse(userId=payload.user_id, deactivated=deactivated)
