"""SQL-backed step store for WorkflowStep rows."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from src.bikeshop.core.exceptions import DuplicateStepError, PersistenceError
from src.bikeshop.core.logging import get_logger
from src.bikeshop.models.transaction import Transaction
from src.bikeshop.models.workflow import WorkflowStep
from src.bikeshop.repositories.base import BaseRepository
from src.bikeshop.schemas.workflow import WorkflowStepsQuery

logger = get_logger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"
STEP_ORDER_CONSTRAINT = "uq_workflow_steps_transaction_workflow_order"
# SQLite names the columns instead of the constraint
STEP_ORDER_COLUMNS = (
    "workflow_steps.transaction_id, workflow_steps.workflow_type, workflow_steps.step_order"
)


def is_step_order_violation(error: IntegrityError) -> bool:
    """True only when the error comes from the step order unique constraint.

    asyncpg reports the SQLSTATE and constraint name on the driver error
    (SQLAlchemy keeps the asyncpg exception as its cause). SQLite only
    describes the failure in the message.
    """
    orig = error.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        constraint = getattr(orig, "constraint_name", None) or getattr(
            getattr(orig, "__cause__", None), "constraint_name", None
        )
        if constraint is not None:
            return constraint == STEP_ORDER_CONSTRAINT
    message = str(orig)
    return STEP_ORDER_CONSTRAINT in message or STEP_ORDER_COLUMNS in message


class WorkflowStepRepository(BaseRepository[WorkflowStep]):
    """Step store over the workflow_steps table.

    Writes commit on their own: a batch insert is all-or-nothing and a
    failed write rolls the session back before raising.
    """

    model = WorkflowStep

    async def exists(self, transaction_id: UUID) -> bool:
        """Check whether the owning transaction exists."""
        try:
            result = await self.session.execute(
                select(Transaction.id).where(Transaction.id == transaction_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up transaction: {e}") from e
        return result.scalar_one_or_none() is not None

    async def find_steps(self, transaction_id: UUID, workflow_type: str) -> list[WorkflowStep]:
        """Steps of one workflow on one transaction, ascending step_order."""
        try:
            result = await self.session.execute(
                select(WorkflowStep)
                .where(
                    WorkflowStep.transaction_id == transaction_id,
                    WorkflowStep.workflow_type == workflow_type,
                )
                .order_by(WorkflowStep.step_order)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load workflow steps: {e}") from e
        return list(result.scalars().all())

    async def list_steps(self, query: WorkflowStepsQuery) -> list[WorkflowStep]:
        """Steps matching optional filters, ordered by step_order then created_at."""
        statement = select(WorkflowStep)
        if query.transaction_id is not None:
            statement = statement.where(WorkflowStep.transaction_id == query.transaction_id)
        if query.workflow_type is not None:
            statement = statement.where(WorkflowStep.workflow_type == query.workflow_type.value)
        if query.is_completed is not None:
            statement = statement.where(WorkflowStep.is_completed == query.is_completed)
        statement = statement.order_by(WorkflowStep.step_order, WorkflowStep.created_at)

        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list workflow steps: {e}") from e
        return list(result.scalars().all())

    async def find_by_id(self, step_id: UUID) -> WorkflowStep | None:
        try:
            return await self.get_by_id(step_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load workflow step: {e}") from e

    async def insert_batch(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]:
        """Insert all steps in one commit.

        Raises:
            DuplicateStepError: If any row violates the step order unique constraint.
            PersistenceError: On any other database failure.
        """
        self.session.add_all(steps)
        await self._commit("insert_batch")
        return list(steps)

    async def update(self, step: WorkflowStep) -> WorkflowStep:
        self.add(step)
        await self._commit("update")
        try:
            await self.session.refresh(step)
        except SQLAlchemyError as e:
            logger.error("Workflow step reload failed", step_id=str(step.id), error=str(e))
            raise PersistenceError(f"Failed to reload workflow step: {e}") from e
        return step

    async def update_many(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]:
        """Persist several modified steps in one commit."""
        self.session.add_all(steps)
        await self._commit("update_many")
        return list(steps)

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_step_order_violation(e):
                raise DuplicateStepError(
                    "Workflow step already exists for this transaction, workflow and order"
                ) from e
            logger.error("Workflow step write rejected", operation=operation, error=str(e.orig))
            raise PersistenceError(f"Workflow step write rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Workflow step write failed", operation=operation, error=str(e))
            raise PersistenceError(f"Workflow step write failed: {e}") from e
