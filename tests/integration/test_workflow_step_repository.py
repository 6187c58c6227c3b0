"""SQL step store and transaction context repository against SQLite."""

import asyncio
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

from src.bikeshop.core.db import get_session
from src.bikeshop.core.exceptions import (
    DuplicateStepError,
    PersistenceError,
    TransactionNotFound,
    WorkflowAlreadyInitialized,
)
from src.bikeshop.core.notifications import NotificationOutbox
from src.bikeshop.models import Transaction, User, WorkflowType
from src.bikeshop.models.enums import BikeCondition
from src.bikeshop.repositories import (
    IsolatedTransactionContextProvider,
    TransactionContextRepository,
    WorkflowStepRepository,
)
from src.bikeshop.schemas.workflow import WorkflowStepsQuery
from src.bikeshop.services.workflow_step_service import WorkflowStepService
from tests.factories import WorkflowStepFactory
from tests.helpers import RecordingChannel, StaticContextProvider, no_sleep

pytestmark = pytest.mark.integration


@pytest.fixture
async def repo(engine: AsyncEngine) -> AsyncGenerator[WorkflowStepRepository, None]:
    """Step store on its own session, separate from the seeding session."""
    async with get_session(engine) as session:
        yield WorkflowStepRepository(session)


def bike_sales_steps(transaction: Transaction, user: User):
    return WorkflowStepFactory.workflow(transaction_id=transaction.id, created_by=user.id)


def enforce_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite leaves foreign keys off unless each connection asks for them."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class TestWorkflowStepRepository:
    async def test_exists(self, repo, sale_transaction):
        assert await repo.exists(sale_transaction.id)
        assert not await repo.exists(uuid4())

    async def test_insert_and_find_in_order(self, repo, sale_transaction, staff_user):
        steps = bike_sales_steps(sale_transaction, staff_user)

        await repo.insert_batch(list(reversed(steps)))
        found = await repo.find_steps(sale_transaction.id, WorkflowType.BIKE_SALES.value)

        assert [s.step_order for s in found] == [1, 2, 3, 4, 5]
        assert await repo.find_steps(sale_transaction.id, WorkflowType.REPAIR_PROCESS.value) == []

    async def test_duplicate_batch_is_rejected(self, repo, sale_transaction, staff_user):
        transaction_id = sale_transaction.id
        await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))

        with pytest.raises(DuplicateStepError):
            await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))

        found = await repo.find_steps(transaction_id, WorkflowType.BIKE_SALES.value)
        assert len(found) == 5

    async def test_failed_batch_writes_nothing(self, repo, sale_transaction, staff_user):
        transaction_id = sale_transaction.id
        await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))
        mixed = [
            WorkflowStepFactory.build(
                transaction_id=transaction_id,
                workflow_type=WorkflowType.REPAIR_PROCESS.value,
                step_name="Assessment",
                step_order=1,
                created_by=staff_user.id,
            ),
            WorkflowStepFactory.build(
                transaction_id=transaction_id,
                step_name="BikeSpec",
                step_order=1,
                created_by=staff_user.id,
            ),
        ]

        with pytest.raises(DuplicateStepError):
            await repo.insert_batch(mixed)

        assert await repo.find_steps(transaction_id, WorkflowType.REPAIR_PROCESS.value) == []

    async def test_foreign_key_failure_is_not_a_duplicate(self, engine, repo, sale_transaction):
        enforce_foreign_keys(engine)
        unknown_user = uuid4()
        steps = WorkflowStepFactory.workflow(
            transaction_id=sale_transaction.id, created_by=unknown_user
        )

        with pytest.raises(PersistenceError) as exc_info:
            await repo.insert_batch(steps)

        assert not isinstance(exc_info.value, DuplicateStepError)
        assert "FOREIGN KEY" in exc_info.value.message
        found = await repo.find_steps(sale_transaction.id, WorkflowType.BIKE_SALES.value)
        assert found == []

    async def test_other_unique_violation_is_not_a_duplicate(
        self, engine, repo, sale_transaction, staff_user
    ):
        steps = await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))
        same_id = WorkflowStepFactory.build(
            id=steps[0].id,
            transaction_id=sale_transaction.id,
            workflow_type=WorkflowType.REPAIR_PROCESS.value,
            step_name="Assessment",
            step_order=1,
            created_by=staff_user.id,
        )

        async with get_session(engine) as other:
            with pytest.raises(PersistenceError) as exc_info:
                await WorkflowStepRepository(other).insert_batch([same_id])

        assert not isinstance(exc_info.value, DuplicateStepError)
        assert await repo.find_steps(sale_transaction.id, WorkflowType.REPAIR_PROCESS.value) == []

    async def test_update_is_visible_to_other_sessions(
        self, engine, repo, sale_transaction, staff_user
    ):
        steps = await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))
        build = steps[1]
        build.is_completed = True
        build.completed_by = staff_user.id

        await repo.update(build)

        async with get_session(engine) as other:
            reread = await WorkflowStepRepository(other).find_by_id(build.id)
        assert reread.is_completed
        assert reread.completed_by == staff_user.id

    async def test_update_many(self, repo, sale_transaction, staff_user):
        steps = await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))
        for step in steps:
            step.is_completed = True

        await repo.update_many(steps)

        found = await repo.list_steps(WorkflowStepsQuery(is_completed=False))
        assert found == []

    async def test_list_steps_filters(self, repo, sale_transaction, bare_transaction, staff_user):
        await repo.insert_batch(bike_sales_steps(sale_transaction, staff_user))
        await repo.insert_batch(
            WorkflowStepFactory.workflow(
                WorkflowType.REPAIR_PROCESS,
                transaction_id=bare_transaction.id,
                created_by=staff_user.id,
            )
        )

        everything = await repo.list_steps(WorkflowStepsQuery())
        repair = await repo.list_steps(
            WorkflowStepsQuery(workflow_type=WorkflowType.REPAIR_PROCESS)
        )
        for_sale = await repo.list_steps(WorkflowStepsQuery(transaction_id=sale_transaction.id))

        assert len(everything) == 9
        assert [s.step_order for s in everything] == sorted(s.step_order for s in everything)
        assert {s.transaction_id for s in repair} == {bare_transaction.id}
        assert len(for_sale) == 5

    async def test_find_by_id_missing(self, repo):
        assert await repo.find_by_id(uuid4()) is None


class TestTransactionContextRepository:
    async def test_joins_bike_and_customer(self, db_session, sale_transaction):
        context = await TransactionContextRepository(db_session).get_context(sale_transaction.id)

        assert context.transaction_num == 1042
        assert context.total_cost == 450.0
        assert context.bike.make == "Trek"
        assert context.bike.condition is BikeCondition.USED
        assert context.customer.full_name == "Jo Rivera"

    async def test_bare_transaction(self, db_session, bare_transaction):
        context = await TransactionContextRepository(db_session).get_context(bare_transaction.id)

        assert context.bike is None
        assert context.customer is None

    async def test_missing_transaction(self, db_session):
        with pytest.raises(TransactionNotFound):
            await TransactionContextRepository(db_session).get_context(uuid4())

    async def test_isolated_provider_opens_own_session(self, engine, sale_transaction):
        provider = IsolatedTransactionContextProvider(engine)

        context = await provider.get_context(sale_transaction.id)

        assert context.transaction_id == sale_transaction.id


class TestConcurrentInitialization:
    async def test_two_sessions_one_winner(self, engine, sale_transaction, staff_user):
        """Separate sessions racing to initialize leave exactly one set of steps."""
        transaction_id = sale_transaction.id
        outbox = NotificationOutbox(RecordingChannel(), sleep=no_sleep)

        async def initialize():
            async with get_session(engine) as session:
                service = WorkflowStepService(
                    WorkflowStepRepository(session), StaticContextProvider(), outbox
                )
                return await service.initialize_workflow(
                    transaction_id, WorkflowType.BIKE_SALES, staff_user.id
                )

        results = await asyncio.gather(initialize(), initialize(), return_exceptions=True)

        assert sum(isinstance(r, list) for r in results) == 1
        assert sum(isinstance(r, WorkflowAlreadyInitialized) for r in results) == 1
        async with get_session(engine) as session:
            steps = await WorkflowStepRepository(session).find_steps(
                transaction_id, WorkflowType.BIKE_SALES.value
            )
        assert len(steps) == 5
