"""Collaborator contracts consumed by the workflow step service."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable
from uuid import UUID

from src.bikeshop.core.notifications.channel import NotificationChannel
from src.bikeshop.models.workflow import WorkflowStep
from src.bikeshop.schemas.transaction import TransactionContext
from src.bikeshop.schemas.workflow import WorkflowStepsQuery


@runtime_checkable
class StepStore(Protocol):
    """Durable storage for workflow steps.

    Implementations must enforce uniqueness of
    (transaction_id, workflow_type, step_order) and raise DuplicateStepError
    when a write violates it. Other failures raise PersistenceError.
    """

    async def exists(self, transaction_id: UUID) -> bool: ...

    async def find_steps(self, transaction_id: UUID, workflow_type: str) -> list[WorkflowStep]: ...

    async def list_steps(self, query: WorkflowStepsQuery) -> list[WorkflowStep]: ...

    async def insert_batch(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]: ...

    async def find_by_id(self, step_id: UUID) -> WorkflowStep | None: ...

    async def update(self, step: WorkflowStep) -> WorkflowStep: ...

    async def update_many(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]: ...


@runtime_checkable
class TransactionContextProvider(Protocol):
    async def get_context(self, transaction_id: UUID) -> TransactionContext:
        """Raises TransactionNotFound when the transaction does not exist."""
        ...


__all__ = ["NotificationChannel", "StepStore", "TransactionContextProvider"]
