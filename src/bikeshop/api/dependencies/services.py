"""Service factory dependencies.

The notification outbox and context provider are process-wide and live on
app.state; the step store is request-scoped.
"""

from typing import Annotated

from fastapi import Depends, Request

from src.bikeshop.api.dependencies.repositories import WorkflowStepRepo
from src.bikeshop.core.notifications import NotificationOutbox
from src.bikeshop.services.interfaces import TransactionContextProvider
from src.bikeshop.services.workflow_step_service import WorkflowStepService


def get_notification_outbox(request: Request) -> NotificationOutbox:
    """Get the application's notification outbox."""
    return request.app.state.notification_outbox


def get_context_provider(request: Request) -> TransactionContextProvider:
    """Get the transaction context provider used by notifications."""
    return request.app.state.context_provider


OutboxDep = Annotated[NotificationOutbox, Depends(get_notification_outbox)]
ContextProviderDep = Annotated[TransactionContextProvider, Depends(get_context_provider)]


def get_workflow_step_service(
    step_repo: WorkflowStepRepo,
    context_provider: ContextProviderDep,
    outbox: OutboxDep,
) -> WorkflowStepService:
    """Get workflow step service."""
    return WorkflowStepService(step_repo, context_provider, outbox)


WorkflowStepServiceDep = Annotated[WorkflowStepService, Depends(get_workflow_step_service)]
