"""In-memory collaborators for exercising the workflow engine without I/O."""

import asyncio
from collections.abc import Iterable, Sequence
from uuid import UUID

from src.bikeshop.core.exceptions import (
    DuplicateStepError,
    NotificationDispatchError,
    PersistenceError,
    TransactionNotFound,
)
from src.bikeshop.models.workflow import WorkflowStep
from src.bikeshop.schemas.notification import NotificationRequest
from src.bikeshop.schemas.transaction import TransactionContext
from src.bikeshop.schemas.workflow import WorkflowStepsQuery


async def no_sleep(seconds: float) -> None:
    """Stand-in for asyncio.sleep that never waits."""


class RecordingSleep:
    """Records requested backoff delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class InMemoryStepStore:
    """Step store backed by a dict.

    Enforces the (transaction_id, workflow_type, step_order) uniqueness the
    SQL store gets from its constraint. With `yield_on_read=True` every read
    gives up the event loop once after taking its snapshot, so concurrent
    initializers can interleave between their existence check and their insert.
    """

    def __init__(self, transactions: Iterable[UUID] = (), yield_on_read: bool = False):
        self.transactions = set(transactions)
        self.steps: dict[UUID, WorkflowStep] = {}
        self.yield_on_read = yield_on_read
        self.insert_calls = 0

    def _key(self, step: WorkflowStep) -> tuple[UUID, str, int]:
        return step.transaction_id, step.workflow_type, step.step_order

    async def _maybe_yield(self) -> None:
        if self.yield_on_read:
            await asyncio.sleep(0)

    async def exists(self, transaction_id: UUID) -> bool:
        await self._maybe_yield()
        return transaction_id in self.transactions

    async def find_steps(self, transaction_id: UUID, workflow_type: str) -> list[WorkflowStep]:
        steps = [
            s
            for s in self.steps.values()
            if s.transaction_id == transaction_id and s.workflow_type == workflow_type
        ]
        await self._maybe_yield()
        return sorted(steps, key=lambda s: s.step_order)

    async def list_steps(self, query: WorkflowStepsQuery) -> list[WorkflowStep]:
        steps = list(self.steps.values())
        if query.transaction_id is not None:
            steps = [s for s in steps if s.transaction_id == query.transaction_id]
        if query.workflow_type is not None:
            steps = [s for s in steps if s.workflow_type == query.workflow_type.value]
        if query.is_completed is not None:
            steps = [s for s in steps if s.is_completed == query.is_completed]
        return sorted(steps, key=lambda s: (s.step_order, s.created_at))

    async def insert_batch(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]:
        self.insert_calls += 1
        taken = {self._key(s) for s in self.steps.values()}
        batch_keys = [self._key(s) for s in steps]
        if len(set(batch_keys)) != len(batch_keys) or taken.intersection(batch_keys):
            raise DuplicateStepError("duplicate step order")
        for step in steps:
            self.steps[step.id] = step
        return list(steps)

    async def find_by_id(self, step_id: UUID) -> WorkflowStep | None:
        return self.steps.get(step_id)

    async def update(self, step: WorkflowStep) -> WorkflowStep:
        self.steps[step.id] = step
        return step

    async def update_many(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]:
        for step in steps:
            self.steps[step.id] = step
        return list(steps)


class FailingWriteStore(InMemoryStepStore):
    """Step store whose updates are rejected by the database."""

    async def update(self, step: WorkflowStep) -> WorkflowStep:
        raise PersistenceError("Workflow step write failed: database is locked")

    async def update_many(self, steps: Sequence[WorkflowStep]) -> list[WorkflowStep]:
        raise PersistenceError("Workflow step write failed: database is locked")


class StaticContextProvider:
    """Context provider over a fixed set of transaction snapshots."""

    def __init__(self, contexts: Iterable[TransactionContext] = ()):
        self.contexts = {c.transaction_id: c for c in contexts}
        self.lookups: list[UUID] = []

    async def get_context(self, transaction_id: UUID) -> TransactionContext:
        self.lookups.append(transaction_id)
        try:
            return self.contexts[transaction_id]
        except KeyError as e:
            raise TransactionNotFound(transaction_id) from e


class RecordingChannel:
    """Notification channel that keeps everything it is asked to send."""

    def __init__(self) -> None:
        self.sent: list[NotificationRequest] = []

    async def send(self, request: NotificationRequest) -> None:
        self.sent.append(request)


class FailingChannel:
    """Channel that fails the first `failures` sends (forever when None)."""

    def __init__(self, failures: int | None = None, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or NotificationDispatchError("Slack API error: 500 Internal Server Error")
        self.attempts = 0
        self.sent: list[NotificationRequest] = []

    async def send(self, request: NotificationRequest) -> None:
        self.attempts += 1
        if self.failures is None or self.attempts <= self.failures:
            raise self.error
        self.sent.append(request)


class BlockingChannel:
    """Channel whose sends wait until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.sent: list[NotificationRequest] = []

    async def send(self, request: NotificationRequest) -> None:
        self.started.set()
        await self.release.wait()
        self.sent.append(request)


def actor_headers(user_id: UUID) -> dict[str, str]:
    """Headers identifying the acting staff member."""
    return {"X-User-ID": str(user_id)}
