"""Integration test fixtures for database and HTTP client operations.

The SQL step store and context repository run against a SQLite file in the
test's tmp_path, created straight from the model metadata.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.bikeshop.api.dependencies import get_db_session
from src.bikeshop.core.db import get_session
from src.bikeshop.core.notifications import NotificationOutbox
from src.bikeshop.main import create_app
from src.bikeshop.models import Transaction, User
from src.bikeshop.repositories import IsolatedTransactionContextProvider
from tests.factories import BikeFactory, CustomerFactory, TransactionFactory, UserFactory
from tests.helpers import RecordingChannel, no_sleep


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a throwaway SQLite database with every table."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bikeshop.db'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session for database operations.

    Tests must commit explicitly to make rows visible to other sessions.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> User:
    user = UserFactory.build()
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def sale_transaction(db_session: AsyncSession) -> Transaction:
    """A transaction with a used bike and a customer attached."""
    bike = BikeFactory.build(make="Trek", model="FX 2", condition="Used")
    customer = CustomerFactory.build(first_name="Jo", last_name="Rivera")
    db_session.add_all([bike, customer])
    await db_session.flush()

    transaction = TransactionFactory.build(
        transaction_num=1042,
        bike_id=bike.id,
        customer_id=customer.id,
        total_cost=450.0,
    )
    db_session.add(transaction)
    await db_session.commit()
    return transaction


@pytest.fixture
async def bare_transaction(db_session: AsyncSession) -> Transaction:
    """A transaction with neither bike nor customer."""
    transaction = TransactionFactory.build()
    db_session.add(transaction)
    await db_session.commit()
    return transaction


@pytest.fixture
def recording_channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def app_outbox(recording_channel: RecordingChannel) -> NotificationOutbox:
    return NotificationOutbox(recording_channel, sleep=no_sleep)


@pytest.fixture
def app(engine: AsyncEngine, app_outbox: NotificationOutbox) -> FastAPI:
    """The full app, bound to the SQLite test database."""
    app = create_app()
    app.state.notification_outbox = app_outbox
    app.state.context_provider = IsolatedTransactionContextProvider(engine)

    async def _get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    return app


@pytest.fixture
async def client(
    app: FastAPI, app_outbox: NotificationOutbox
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the full app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await app_outbox.drain(timeout=1.0)
    app.dependency_overrides.clear()
