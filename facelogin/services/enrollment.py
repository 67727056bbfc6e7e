"""Enrollment and revocation of face descriptors."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.config.settings import Settings, get_settings
from facelogin.db import models
from facelogin.errors import AccountLookupError, NoFaceDetected
from facelogin.imaging.payload import parse_image_payload
from facelogin.perception.service import PerceptionService
from facelogin.services.face_data import FaceDataService

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Creates and revokes the descriptors that face login matches against."""

    def __init__(
        self,
        perception: PerceptionService,
        *,
        settings: Settings | None = None,
        face_data: FaceDataService | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._perception = perception
        self._face_data = face_data or FaceDataService()

    async def _require_profile(self, session: AsyncSession, account_id: str) -> models.Profile:
        profile = await self._face_data.get_profile(session, account_id=account_id)
        if profile is None:
            raise AccountLookupError("المستخدم غير موجود")
        return profile

    async def enroll(
        self,
        session: AsyncSession,
        *,
        account_id: str,
        raw_image: str | None,
    ) -> models.FaceData:
        """Describe the submitted face and store it as a new active descriptor."""

        profile = await self._require_profile(session, account_id)
        image = parse_image_payload(raw_image, min_length=self._settings.min_image_payload_length)
        if not await self._perception.detect_face(image):
            raise NoFaceDetected()

        descriptor = await self._perception.describe(image)
        record = await self._face_data.add_descriptor(
            session,
            profile=profile,
            descriptor_text=descriptor,
            source_image_ref=image.reference,
        )
        logger.info("Enrolled descriptor %s for account %s", record.id, account_id)
        return record

    async def disable(self, session: AsyncSession, *, account_id: str) -> int:
        """Deactivate all descriptors of the account and switch face login off."""

        profile = await self._require_profile(session, account_id)
        deactivated = await self._face_data.deactivate_account(session, profile=profile)
        logger.info("Disabled face login for %s (%d descriptors)", account_id, deactivated)
        return deactivated
