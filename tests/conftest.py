"""Root test fixtures shared across all test types.

In-memory fakes for the step store, context provider and notification
channel live in tests/helpers.py; SQL-backed fixtures are in
tests/integration/conftest.py.
"""

import os

# Set APP_ENV and a throwaway database before any app imports
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SLACK_NOTIFICATIONS_ENABLED", "false")

# ruff: noqa: E402 - Imports must be after env var setup
from uuid import UUID, uuid4

import pytest

from src.bikeshop.core.config import get_settings
from src.bikeshop.core.notifications import NotificationOutbox
from src.bikeshop.models.enums import BikeCondition
from src.bikeshop.schemas.transaction import BikeSummary, CustomerSummary, TransactionContext
from src.bikeshop.services.notification_dispatcher import NotificationDispatcher
from src.bikeshop.services.workflow_step_service import WorkflowStepService
from tests.helpers import (
    InMemoryStepStore,
    RecordingChannel,
    StaticContextProvider,
    no_sleep,
)

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- Collaborator fakes ---


@pytest.fixture
def transaction_id() -> UUID:
    return uuid4()


@pytest.fixture
def actor_id() -> UUID:
    return uuid4()


@pytest.fixture
def transaction_context(transaction_id: UUID) -> TransactionContext:
    """A fully populated transaction: bike, customer and a number."""
    return TransactionContext(
        transaction_id=transaction_id,
        transaction_num=1042,
        total_cost=450.0,
        bike=BikeSummary(make="Trek", model="FX 2", condition=BikeCondition.USED, price=450.0),
        customer=CustomerSummary(first_name="Jo", last_name="Rivera", email="jo@example.com"),
    )


@pytest.fixture
def step_store(transaction_id: UUID) -> InMemoryStepStore:
    """Step store that already knows about the fixture transaction."""
    return InMemoryStepStore(transactions={transaction_id})


@pytest.fixture
def context_provider(transaction_context: TransactionContext) -> StaticContextProvider:
    return StaticContextProvider([transaction_context])


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def outbox(channel: RecordingChannel) -> NotificationOutbox:
    """Outbox that retries immediately instead of sleeping."""
    return NotificationOutbox(channel, max_attempts=3, backoff_seconds=0.5, sleep=no_sleep)


@pytest.fixture
def service(
    step_store: InMemoryStepStore,
    context_provider: StaticContextProvider,
    outbox: NotificationOutbox,
) -> WorkflowStepService:
    return WorkflowStepService(step_store, context_provider, outbox, NotificationDispatcher())
