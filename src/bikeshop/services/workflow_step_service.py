"""Workflow step engine.

Steps move between two states, pending and completed, in any order:
completing a step never requires the lower-order steps to be done first,
and a completed step can always be reopened. Completing a step schedules a
notification in the background; the notification path can fail without
affecting the completion that was already persisted.
"""

from uuid import UUID

from src.bikeshop.core.exceptions import (
    DuplicateStepError,
    StepNotFound,
    TransactionNotFound,
    WorkflowAlreadyInitialized,
    WorkflowNotInitialized,
)
from src.bikeshop.core.logging import get_logger
from src.bikeshop.core.notifications.outbox import NotificationOutbox
from src.bikeshop.models.base import utc_now
from src.bikeshop.models.enums import WorkflowType
from src.bikeshop.models.workflow import WorkflowStep
from src.bikeshop.schemas.workflow import (
    CurrentStep,
    WorkflowProgress,
    WorkflowStepRead,
    WorkflowStepsQuery,
)
from src.bikeshop.services.interfaces import StepStore, TransactionContextProvider
from src.bikeshop.services.notification_dispatcher import NotificationDispatcher
from src.bikeshop.services.workflow_definitions import parse_workflow_type, steps_for

logger = get_logger(__name__)


def compute_progress(
    transaction_id: UUID, workflow_type: WorkflowType, steps: list[WorkflowStep]
) -> WorkflowProgress:
    """Summarize completion; an empty workflow reports zero progress."""
    total = len(steps)
    completed = sum(1 for step in steps if step.is_completed)
    percentage = completed / total * 100 if total else 0.0

    ordered = sorted(steps, key=lambda s: s.step_order)
    pending = [s for s in ordered if not s.is_completed]
    current_step = None
    if pending:
        first = pending[0]
        current_step = CurrentStep(
            step_id=first.id, step_name=first.step_name, step_order=first.step_order
        )

    return WorkflowProgress(
        transaction_id=transaction_id,
        workflow_type=workflow_type,
        total=total,
        completed=completed,
        percentage=percentage,
        current_step=current_step,
        is_complete=total > 0 and completed == total,
        steps=[WorkflowStepRead.model_validate(s) for s in ordered],
    )


class WorkflowStepService:
    """Initializes, completes, reopens and reports on workflow steps."""

    def __init__(
        self,
        store: StepStore,
        context_provider: TransactionContextProvider,
        outbox: NotificationOutbox,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.store = store
        self.context_provider = context_provider
        self.outbox = outbox
        self.dispatcher = dispatcher or NotificationDispatcher()

    async def initialize_workflow(
        self,
        transaction_id: UUID,
        workflow_type: WorkflowType | str,
        actor_id: UUID,
    ) -> list[WorkflowStep]:
        """Create every canonical step of a workflow for a transaction.

        The batch is written in a single commit. A concurrent initializer that
        slips past the existence check loses on the unique constraint and gets
        the same WorkflowAlreadyInitialized as a sequential one.

        Returns:
            The created steps in ascending step_order.

        Raises:
            UnknownWorkflowType: If the workflow type is not registered.
            TransactionNotFound: If the transaction does not exist.
            WorkflowAlreadyInitialized: If steps already exist for this workflow.
            PersistenceError: If the batch write fails for another reason.
        """
        workflow = parse_workflow_type(workflow_type)
        definitions = steps_for(workflow)

        if not await self.store.exists(transaction_id):
            raise TransactionNotFound(transaction_id)

        existing = await self.store.find_steps(transaction_id, workflow.value)
        if existing:
            raise WorkflowAlreadyInitialized(transaction_id, workflow.value)

        now = utc_now()
        steps = [
            WorkflowStep(
                transaction_id=transaction_id,
                workflow_type=workflow.value,
                step_name=definition.step_name,
                step_order=definition.step_order,
                is_completed=False,
                created_by=actor_id,
                created_at=now,
                updated_at=now,
            )
            for definition in definitions
        ]

        try:
            created = await self.store.insert_batch(steps)
        except DuplicateStepError as e:
            logger.info(
                "Concurrent workflow initialization lost the race",
                transaction_id=str(transaction_id),
                workflow_type=workflow.value,
            )
            raise WorkflowAlreadyInitialized(transaction_id, workflow.value) from e

        logger.info(
            "Workflow initialized",
            transaction_id=str(transaction_id),
            workflow_type=workflow.value,
            step_count=len(created),
            actor_id=str(actor_id),
        )
        return sorted(created, key=lambda s: s.step_order)

    async def get_step(self, step_id: UUID) -> WorkflowStep:
        step = await self.store.find_by_id(step_id)
        if step is None:
            raise StepNotFound(step_id)
        return step

    async def list_steps(self, query: WorkflowStepsQuery) -> list[WorkflowStep]:
        return await self.store.list_steps(query)

    async def get_workflow_steps(
        self, transaction_id: UUID, workflow_type: WorkflowType | str
    ) -> list[WorkflowStep]:
        """Steps of one workflow, or an empty list if it was never initialized."""
        workflow = parse_workflow_type(workflow_type)
        steps = await self.store.find_steps(transaction_id, workflow.value)
        return sorted(steps, key=lambda s: s.step_order)

    async def complete_step(self, step_id: UUID, actor_id: UUID) -> WorkflowStep:
        """Mark a step completed and schedule its notification.

        The returned step is already persisted; notification failures are
        logged by the outbox and never reach the caller.

        Raises:
            StepNotFound: If the step does not exist.
            PersistenceError: If the update cannot be written.
        """
        step = await self.get_step(step_id)

        now = utc_now()
        step.is_completed = True
        step.completed_by = actor_id
        step.completed_at = now
        step.updated_at = now
        step = await self.store.update(step)

        logger.info(
            "Workflow step completed",
            step_id=str(step.id),
            step_name=step.step_name,
            transaction_id=str(step.transaction_id),
            actor_id=str(actor_id),
        )

        snapshot = WorkflowStepRead.model_validate(step)
        self.outbox.spawn(
            self._notify_step_completed(snapshot),
            name=f"step-completed-{snapshot.step_id}",
        )
        return step

    async def reopen_step(self, step_id: UUID, actor_id: UUID) -> WorkflowStep:
        """Return a step to pending. Never notifies.

        Raises:
            StepNotFound: If the step does not exist.
            PersistenceError: If the update cannot be written.
        """
        step = await self.get_step(step_id)

        step.is_completed = False
        step.completed_by = None
        step.completed_at = None
        step.updated_at = utc_now()
        step = await self.store.update(step)

        logger.info(
            "Workflow step reopened",
            step_id=str(step.id),
            step_name=step.step_name,
            transaction_id=str(step.transaction_id),
            actor_id=str(actor_id),
        )
        return step

    async def reset_workflow(
        self,
        transaction_id: UUID,
        workflow_type: WorkflowType | str,
        actor_id: UUID,
    ) -> list[WorkflowStep]:
        """Reopen every step of a workflow in one write.

        Raises:
            UnknownWorkflowType: If the workflow type is not registered.
            TransactionNotFound: If the transaction does not exist.
            WorkflowNotInitialized: If the workflow has no steps.
        """
        workflow = parse_workflow_type(workflow_type)
        if not await self.store.exists(transaction_id):
            raise TransactionNotFound(transaction_id)

        steps = await self.store.find_steps(transaction_id, workflow.value)
        if not steps:
            raise WorkflowNotInitialized(transaction_id, workflow.value)

        now = utc_now()
        for step in steps:
            step.is_completed = False
            step.completed_by = None
            step.completed_at = None
            step.updated_at = now

        reset = await self.store.update_many(steps)
        logger.info(
            "Workflow reset",
            transaction_id=str(transaction_id),
            workflow_type=workflow.value,
            step_count=len(reset),
            actor_id=str(actor_id),
        )
        return sorted(reset, key=lambda s: s.step_order)

    async def get_progress(
        self, transaction_id: UUID, workflow_type: WorkflowType | str
    ) -> WorkflowProgress:
        workflow = parse_workflow_type(workflow_type)
        steps = await self.store.find_steps(transaction_id, workflow.value)
        return compute_progress(transaction_id, workflow, steps)

    async def _notify_step_completed(self, step: WorkflowStepRead) -> None:
        """Context lookup, dispatch decision and delivery for one completion."""
        try:
            context = await self.context_provider.get_context(step.transaction_id)
            request = self.dispatcher.decide(step, context)
        except Exception as e:
            logger.warning(
                "Could not build step completion notification",
                step_id=str(step.step_id),
                transaction_id=str(step.transaction_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if request is None:
            logger.debug(
                "No notification for completed step",
                step_id=str(step.step_id),
                step_name=step.step_name,
            )
            return

        await self.outbox.deliver(request)
