"""Pytest fixtures for Document Verification tests."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from services.document_verification.app.config import Settings, get_settings
from services.document_verification.app.core.verification import DocumentVerification
from services.document_verification.app.db.models import Base
from services.document_verification.app.db.repository import RegistryRepository
from services.document_verification.app.dependencies import (
    get_db,
    get_executor,
    get_sqs_client,
)
from services.document_verification.app.execution import RegistryExecutor
from services.document_verification.app.main import app
from services.document_verification.tests.helpers import ADMIN, fixed_clock


@pytest.fixture
async def db_engine():
    """Create in-memory SQLite database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def initialized_registry(db_session: AsyncSession) -> str:
    """Registry initialized with ADMIN as administrator and sole verifier."""
    administrator, _ = await RegistryRepository(db_session).initialize(ADMIN)
    await db_session.commit()
    return administrator


@pytest.fixture
def registry() -> DocumentVerification:
    """In-memory registry deployed by ADMIN with a fixed clock."""
    return DocumentVerification.deploy(ADMIN, clock=fixed_clock)


@pytest.fixture
def executor() -> RegistryExecutor:
    return RegistryExecutor(clock=fixed_clock)


@pytest.fixture
def mock_sqs_client():
    """Create mock SQS client for testing."""
    mock = MagicMock()
    mock.send_message = AsyncMock(return_value="test-message-id-123")
    mock.queue_url = "http://test/queue"
    return mock


@pytest.fixture
def test_settings():
    """Create test settings."""
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite:///:memory:",
        sqs_queue_url="http://test/queue",
        sqs_endpoint_url=None,
    )


@pytest.fixture
async def test_client(
    session_factory,
    executor,
    mock_sqs_client,
    test_settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with mocked dependencies."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    def override_get_sqs_client():
        return mock_sqs_client

    def override_get_settings():
        return test_settings

    def override_get_executor():
        return executor

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sqs_client] = override_get_sqs_client
    app.dependency_overrides[get_settings] = override_get_settings
    app.dependency_overrides[get_executor] = override_get_executor

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()

