"""Face login pipeline: presence, description, matching, session."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.config.settings import Settings, get_settings
from facelogin.errors import (
    FaceLoginError,
    NoFaceDetected,
    NoMatch,
    RateLimitExceeded,
    VerificationTimeout,
)
from facelogin.imaging.payload import parse_image_payload
from facelogin.metrics.prometheus_exporter import (
    face_login_attempts_total,
    face_login_duration_seconds,
)
from facelogin.perception.service import PerceptionService
from facelogin.services.attempts import SUCCESS_OUTCOME, AttemptLog
from facelogin.services.face_data import FaceDataService
from facelogin.services.selector import MatchSelector
from facelogin.services.session import IdentityBackend, IssuedSession, SessionIssuer

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AttemptContext:
    """Where a login attempt came from."""

    ip_address: str = "unknown"
    user_agent: str | None = None


class FaceLoginVerifier:
    """Coordinates the perception service, the descriptor store and the identity backend."""

    def __init__(
        self,
        perception: PerceptionService,
        identity: IdentityBackend,
        *,
        settings: Settings | None = None,
        face_data: FaceDataService | None = None,
        attempts: AttemptLog | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._perception = perception
        self._face_data = face_data or FaceDataService()
        self._attempts = attempts or AttemptLog()
        self._selector = MatchSelector(perception, concurrency=self._settings.match_concurrency)
        self._issuer = SessionIssuer(identity, self._face_data)

    async def _check_rate_limit(self, session: AsyncSession, context: AttemptContext) -> None:
        window = timedelta(minutes=self._settings.rate_limit_window_minutes)
        try:
            failures = await self._attempts.count_recent_failures(
                session, ip_address=context.ip_address, window=window
            )
        except SQLAlchemyError as exc:
            logger.error("Rate limit check failed, allowing attempt: %s", exc)
            await session.rollback()
            return
        if failures >= self._settings.rate_limit_max_attempts:
            logger.warning("Rate limit exceeded for %s (%d failures)", context.ip_address, failures)
            raise RateLimitExceeded()

    async def _run(self, session: AsyncSession, raw_image: str | None) -> IssuedSession:
        image = parse_image_payload(raw_image, min_length=self._settings.min_image_payload_length)
        logger.info("Verifying face image (%s, %d bytes)", image.mime_type, image.byte_size)

        if not await self._perception.detect_face(image):
            raise NoFaceDetected()

        descriptor = await self._perception.describe(image)
        records = await self._face_data.list_active_descriptors(session)
        candidate = await self._selector.select(descriptor, records)
        if candidate is None:
            raise NoMatch()

        return await self._issuer.issue(session, candidate=candidate)

    async def verify(
        self,
        session: AsyncSession,
        *,
        raw_image: str | None,
        context: AttemptContext | None = None,
    ) -> IssuedSession:
        """
        Run one full face login attempt.

        Every outcome, refused ones included, is recorded in the attempt log.
        Errors propagate as ``FaceLoginError`` subclasses; partial results of a
        timed-out attempt are discarded.
        """

        context = context or AttemptContext()
        outcome = "UnexpectedError"
        matched_account_id: str | None = None
        started = time.perf_counter()
        try:
            await self._check_rate_limit(session, context)
            result = await asyncio.wait_for(
                self._run(session, raw_image),
                timeout=self._settings.verification_timeout,
            )
        except asyncio.TimeoutError as exc:
            outcome = VerificationTimeout().code
            logger.error("Face verification timed out after %.0fs", self._settings.verification_timeout)
            await session.rollback()
            raise VerificationTimeout() from exc
        except FaceLoginError as exc:
            outcome = exc.code
            logger.info("Face verification rejected: %s", outcome)
            raise
        else:
            outcome = SUCCESS_OUTCOME
            matched_account_id = result.account_id
            return result
        finally:
            face_login_duration_seconds.observe(time.perf_counter() - started)
            face_login_attempts_total.labels(outcome=outcome).inc()
            await self._attempts.record(
                session,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
                outcome=outcome,
                matched_account_id=matched_account_id,
            )
