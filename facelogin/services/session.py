"""Session issuance for an accepted face match."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from urllib.parse import parse_qs, urlsplit

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.db import models
from facelogin.errors import AccountLookupError, SessionIssuanceError
from facelogin.identity.client import IdentityRequestError, LoginLink
from facelogin.metrics.prometheus_exporter import face_login_auto_enabled_total
from facelogin.services.face_data import FaceDataService
from facelogin.services.selector import MatchCandidate

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class IssuedSession:
    """Credentials handed back to the login screen."""

    access_token: str
    refresh_token: str
    account_id: str
    login_identifier: str
    similarity_score: int


class IdentityBackend(Protocol):
    async def generate_magic_link(self, email: str) -> LoginLink: ...

    async def redeem_link(self, action_link: str) -> str | None: ...


def _first(values: Mapping[str, list[str]], key: str) -> str | None:
    found = values.get(key) or []
    return found[0] if found and found[0] else None


def extract_credentials(
    properties: Mapping[str, Any] | None = None,
    location: str | None = None,
) -> tuple[str | None, str | None]:
    """
    Pull access and refresh tokens from link properties or a redirect URL.

    Tokens in the URL fragment win over the query string, which is how the
    identity backend appends them after a magic link is redeemed.
    """

    properties = properties or {}
    access_token = properties.get("access_token") or None
    refresh_token = properties.get("refresh_token") or None
    if (access_token and refresh_token) or not location:
        return access_token, refresh_token

    parts = urlsplit(location)
    for section in (parts.fragment, parts.query):
        values = parse_qs(section)
        access_token = access_token or _first(values, "access_token")
        refresh_token = refresh_token or _first(values, "refresh_token")
    return access_token, refresh_token


class SessionIssuer:
    """The only step that grants authorization."""

    def __init__(
        self,
        identity: IdentityBackend,
        face_data: FaceDataService | None = None,
    ) -> None:
        self._identity = identity
        self._face_data = face_data or FaceDataService()

    async def _load_profile(self, session: AsyncSession, account_id: str) -> models.Profile:
        try:
            profile = await self._face_data.get_profile(session, account_id=account_id)
        except SQLAlchemyError as exc:
            logger.error("Profile lookup for %s failed: %s", account_id, exc)
            raise AccountLookupError() from exc
        if profile is None:
            logger.error("Matched account %s has no profile", account_id)
            raise AccountLookupError()
        if not profile.email:
            logger.error("Matched account %s has no login identifier", account_id)
            raise AccountLookupError("البريد الإلكتروني غير موجود للمستخدم")
        return profile

    async def _auto_enable(self, session: AsyncSession, profile: models.Profile) -> None:
        logger.warning("Auto-enabling face login for account %s after a match", profile.account_id)
        try:
            await self._face_data.enable_face_login(session, profile=profile)
        except SQLAlchemyError as exc:
            logger.error("Failed to enable face login for %s: %s", profile.account_id, exc)
            await session.rollback()
            return
        face_login_auto_enabled_total.inc()

    async def _fetch_credentials(self, email: str) -> tuple[str | None, str | None]:
        try:
            link = await self._identity.generate_magic_link(email)
            access_token, refresh_token = extract_credentials(link.properties)
            if (not access_token or not refresh_token) and link.action_link:
                location = await self._identity.redeem_link(link.action_link)
                access_token, refresh_token = extract_credentials(
                    {"access_token": access_token, "refresh_token": refresh_token},
                    location,
                )
        except IdentityRequestError as exc:
            logger.error("Identity backend failed to issue a login link: %s", exc)
            raise SessionIssuanceError() from exc
        return access_token, refresh_token

    async def issue(
        self,
        session: AsyncSession,
        *,
        candidate: MatchCandidate,
    ) -> IssuedSession:
        profile = await self._load_profile(session, candidate.account_id)
        email = profile.email
        if not profile.face_login_enabled:
            await self._auto_enable(session, profile)

        access_token, refresh_token = await self._fetch_credentials(email)
        if not access_token or not refresh_token:
            logger.error(
                "Login link for %s lacked credentials (access=%s refresh=%s)",
                candidate.account_id,
                bool(access_token),
                bool(refresh_token),
            )
            raise SessionIssuanceError()

        logger.info("Issued session for account %s", candidate.account_id)
        return IssuedSession(
            access_token=access_token,
            refresh_token=refresh_token,
            account_id=candidate.account_id,
            login_identifier=email,
            similarity_score=candidate.similarity_score,
        )
