"""Data access for enrolled descriptors and account auth state."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.db import models


class FaceDataService:
    """Facade over the ``face_data`` and ``profiles`` tables."""

    async def list_active_descriptors(self, session: AsyncSession) -> list[models.FaceData]:
        """Return every active descriptor in enrollment order."""

        stmt = (
            select(models.FaceData)
            .where(models.FaceData.is_active.is_(True))
            .order_by(models.FaceData.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_profile(
        self,
        session: AsyncSession,
        *,
        account_id: str,
    ) -> models.Profile | None:
        stmt = select(models.Profile).where(models.Profile.account_id == account_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def enable_face_login(
        self,
        session: AsyncSession,
        *,
        profile: models.Profile,
    ) -> None:
        """Persist ``face_login_enabled = True`` for the profile."""

        profile.face_login_enabled = True
        session.add(profile)
        await session.commit()

    async def add_descriptor(
        self,
        session: AsyncSession,
        *,
        profile: models.Profile,
        descriptor_text: str,
        source_image_ref: str | None = None,
    ) -> models.FaceData:
        """Store a new active descriptor and mark the profile as enrolled."""

        record = models.FaceData(
            account_id=profile.account_id,
            descriptor_text=descriptor_text,
            source_image_ref=source_image_ref,
            is_active=True,
        )
        profile.face_login_enabled = True
        profile.face_registered_at = models.utcnow()
        session.add_all([record, profile])
        await session.commit()
        await session.refresh(record)
        return record

    async def deactivate_account(
        self,
        session: AsyncSession,
        *,
        profile: models.Profile,
    ) -> int:
        """Soft-revoke every descriptor of the account and disable face login."""

        stmt = (
            update(models.FaceData)
            .where(
                models.FaceData.account_id == profile.account_id,
                models.FaceData.is_active.is_(True),
            )
            .values(is_active=False)
        )
        result = await session.execute(stmt)
        profile.face_login_enabled = False
        session.add(profile)
        await session.commit()
        return result.rowcount or 0
