"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite async databases (in-memory and file-backed), settings,
a scripted fake generation provider, user seeding helpers
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import asyncio
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.boundary.db.base import Base
from virtual_staging.boundary.db.CRUD.credit_crud import credit_account_crud
from virtual_staging.boundary.db.CRUD.user_crud import user_crud
from virtual_staging.boundary.generation.provider import GenerationResult
from virtual_staging.configs.generation import GenerationSettings
from virtual_staging.configs.settings import Settings


def _sqlite_engine(url: str, **kwargs):
    """
    SQLite engine with explicit write transactions.

    The driver's implicit BEGIN is disabled and BEGIN IMMEDIATE is emitted
    instead, so concurrent sessions queue on the write lock the way row
    locks queue on Postgres, and SAVEPOINT behaves.
    """
    engine = create_async_engine(url, **kwargs)

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    engine = _sqlite_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async with factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
async def session_factory(tmp_path):
    """
    File-backed SQLite session factory for tests that need several
    independent connections at once.

    Yields:
        async_sessionmaker: Factory producing sessions on separate connections
    """
    engine = _sqlite_engine(f"sqlite+aiosqlite:///{tmp_path / 'staging.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a configured provider key and a short provider deadline."""
    return Settings(
        generation=GenerationSettings(
            key="test-fal-key-0123456789",
            request_timeout_seconds=1.0,
            staging_variant_count=2,
        ),
    )


class FakeGenerationProvider:
    """
    Scripted generation provider.

    outcomes[i] decides call i: a GenerationResult is returned, an
    exception is raised. Calls beyond the script succeed with one URL.
    """

    def __init__(self, outcomes: list | None = None, delay: float = 0.0) -> None:
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.started = asyncio.Event()

    async def submit(self, prompt: str, image_url: str, options: dict | None = None) -> GenerationResult:
        index = len(self.calls)
        self.calls.append((prompt, image_url))
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)

        if index < len(self.outcomes):
            outcome = self.outcomes[index]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return GenerationResult(
            result_urls=[f"https://fal.media/files/out-{index + 1}.jpeg"],
            provider_job_id=f"req-{index + 1}",
        )

    async def segment(self, text_prompt: str, image_url: str) -> GenerationResult:
        """Mask calls share the script and the call log with submit."""
        return await self.submit(text_prompt, image_url)


@pytest.fixture
def fake_provider_factory():
    """Build FakeGenerationProvider instances with a call script."""
    return FakeGenerationProvider


@pytest.fixture
def fake_provider() -> FakeGenerationProvider:
    """Provider whose calls all succeed."""
    return FakeGenerationProvider()


async def create_user(db: AsyncSession, balance: int = 0, external_id: str | None = None):
    """
    Insert a user with a credit account seeded through a purchase.

    Returns:
        UserModel: Committed user
    """
    user = await user_crud.create(
        db,
        external_id=external_id or f"user_{uuid.uuid4().hex[:12]}",
        email="owner@example.com",
    )
    await credit_account_crud.create(db, user_id=user.id, balance=0)
    if balance:
        await CreditLedger(db).purchase(user.id, balance, "Seed credits")
    await db.commit()
    return user


@pytest.fixture
def seed_user():
    """Create users in an arbitrary session (file-backed tests)."""
    return create_user


@pytest.fixture
def make_user(test_async_db):
    """Create users in the in-memory database."""

    async def _make(balance: int = 0, external_id: str | None = None):
        return await create_user(test_async_db, balance=balance, external_id=external_id)

    return _make


@pytest.fixture
def stale() -> timedelta:
    """Default stuck-job staleness window."""
    return timedelta(minutes=5)
