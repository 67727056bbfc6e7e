"""Shared fixtures: environment, temporary database, perception and identity fakes."""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from facelogin.config.settings import get_settings
from facelogin.db import models
from facelogin.db.session import build_engine, build_session_factory, init_db
from tests.fakes import FakeIdentity, FakePerception


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERCEPTION_API_KEY", "test-perception")
    monkeypatch.setenv("PERCEPTION_BASE_URL", "https://perception.test/v1")
    monkeypatch.setenv("IDENTITY_URL", "https://identity.test/auth/v1")
    monkeypatch.setenv("IDENTITY_SERVICE_KEY", "service-key")
    monkeypatch.setenv("INTERNAL_TOKEN", "internal-secret")
    monkeypatch.setenv("MATCH_CONCURRENCY", "3")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def perception() -> FakePerception:
    return FakePerception()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest_asyncio.fixture
async def session(tmp_path) -> AsyncIterator[AsyncSession]:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'facelogin.db'}")
    await init_db(engine)
    factory = build_session_factory(engine)
    async with factory() as db_session:
        yield db_session
    await engine.dispose()


SeedFn = Callable[..., Awaitable[models.FaceData]]


@pytest.fixture
def seed(session: AsyncSession) -> SeedFn:
    """Return a helper that enrolls a descriptor, creating the profile on first use."""

    async def _seed(
        account_id: str,
        descriptor: str,
        *,
        email: str | None = "",
        enabled: bool = True,
        active: bool = True,
    ) -> models.FaceData:
        profile = await session.get(models.Profile, account_id)
        if profile is None:
            profile = models.Profile(
                account_id=account_id,
                email=f"{account_id.lower()}@police.test" if email == "" else email,
                face_login_enabled=enabled,
            )
            session.add(profile)
        record = models.FaceData(
            account_id=account_id,
            descriptor_text=descriptor,
            is_active=active,
        )
        session.add(record)
        await session.commit()
        await session.refresh(record)
        return record

    return _seed
