"""FastAPI dependency injection definitions."""

from src.bikeshop.api.dependencies.actor import CurrentActor, get_current_actor
from src.bikeshop.api.dependencies.db import DBSession, get_db_session
from src.bikeshop.api.dependencies.repositories import (
    WorkflowStepRepo,
    get_workflow_step_repository,
)
from src.bikeshop.api.dependencies.services import (
    ContextProviderDep,
    OutboxDep,
    WorkflowStepServiceDep,
    get_context_provider,
    get_notification_outbox,
    get_workflow_step_service,
)

__all__ = [
    # Actor
    "CurrentActor",
    "get_current_actor",
    # Database
    "DBSession",
    "get_db_session",
    # Repositories
    "WorkflowStepRepo",
    "get_workflow_step_repository",
    # Services
    "ContextProviderDep",
    "OutboxDep",
    "WorkflowStepServiceDep",
    "get_context_provider",
    "get_notification_outbox",
    "get_workflow_step_service",
]
