"""Per-IP attempt log used for throttling face login."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.db import models

logger = logging.getLogger(__name__)

SUCCESS_OUTCOME = "Success"


class AttemptLog:
    """Reads and writes ``face_login_attempts`` rows."""

    async def count_recent_failures(
        self,
        session: AsyncSession,
        *,
        ip_address: str,
        window: timedelta,
    ) -> int:
        cutoff = models.utcnow() - window
        stmt = select(func.count(models.FaceLoginAttempt.id)).where(
            models.FaceLoginAttempt.ip_address == ip_address,
            models.FaceLoginAttempt.was_successful.is_(False),
            models.FaceLoginAttempt.created_at >= cutoff,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def record(
        self,
        session: AsyncSession,
        *,
        ip_address: str,
        user_agent: str | None,
        outcome: str,
        matched_account_id: str | None = None,
    ) -> None:
        """Store one attempt; a failed write is logged and otherwise ignored."""

        attempt = models.FaceLoginAttempt(
            ip_address=ip_address,
            user_agent=(user_agent or "unknown")[:512],
            was_successful=outcome == SUCCESS_OUTCOME,
            outcome=outcome,
            matched_account_id=matched_account_id,
        )
        try:
            session.add(attempt)
            await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to record face login attempt from %s: %s", ip_address, exc)
            await session.rollback()
