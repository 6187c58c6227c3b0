"""Workflow step endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.bikeshop.api.dependencies import CurrentActor, WorkflowStepServiceDep
from src.bikeshop.models.enums import WorkflowType
from src.bikeshop.schemas.workflow import WorkflowProgress, WorkflowStepRead, WorkflowStepsQuery

router = APIRouter(prefix="/workflow-steps", tags=["workflow-steps"])


@router.get(
    "",
    response_model=list[WorkflowStepRead],
    summary="List workflow steps",
    description="List workflow steps, optionally filtered by transaction, type and completion.",
)
async def list_workflow_steps(
    _actor: CurrentActor,
    service: WorkflowStepServiceDep,
    transaction_id: Annotated[UUID | None, Query(description="Owning transaction")] = None,
    workflow_type: Annotated[WorkflowType | None, Query(description="Workflow type")] = None,
    is_completed: Annotated[bool | None, Query(description="Completion state")] = None,
) -> list[WorkflowStepRead]:
    query = WorkflowStepsQuery(
        transaction_id=transaction_id,
        workflow_type=workflow_type,
        is_completed=is_completed,
    )
    steps = await service.list_steps(query)
    return [WorkflowStepRead.model_validate(step) for step in steps]


@router.get(
    "/transaction/{transaction_id}/{workflow_type}",
    response_model=list[WorkflowStepRead],
    summary="Get a transaction's workflow",
    description="Steps of one workflow on one transaction, in step order.",
    responses={400: {"description": "Unknown workflow type"}},
)
async def get_transaction_workflow_steps(
    transaction_id: UUID,
    workflow_type: str,
    _actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> list[WorkflowStepRead]:
    steps = await service.get_workflow_steps(transaction_id, workflow_type)
    return [WorkflowStepRead.model_validate(step) for step in steps]


@router.get(
    "/progress/{transaction_id}/{workflow_type}",
    response_model=WorkflowProgress,
    summary="Get workflow progress",
    description="Completed over total steps. A workflow that was never initialized reports 0.",
    responses={400: {"description": "Unknown workflow type"}},
)
async def get_workflow_progress(
    transaction_id: UUID,
    workflow_type: str,
    _actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> WorkflowProgress:
    return await service.get_progress(transaction_id, workflow_type)


@router.get(
    "/{step_id}",
    response_model=WorkflowStepRead,
    summary="Get workflow step",
    responses={404: {"description": "Workflow step not found"}},
)
async def get_workflow_step(
    step_id: UUID,
    _actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> WorkflowStepRead:
    step = await service.get_step(step_id)
    return WorkflowStepRead.model_validate(step)


@router.post(
    "/initialize/{transaction_id}/{workflow_type}",
    response_model=list[WorkflowStepRead],
    status_code=status.HTTP_201_CREATED,
    summary="Initialize workflow",
    description="Create all canonical steps of a workflow for a transaction.",
    responses={
        201: {"description": "Workflow created"},
        400: {"description": "Unknown workflow type"},
        404: {"description": "Transaction not found"},
        409: {"description": "Workflow already exists for this transaction"},
    },
)
async def initialize_workflow(
    transaction_id: UUID,
    workflow_type: str,
    actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> list[WorkflowStepRead]:
    steps = await service.initialize_workflow(transaction_id, workflow_type, actor)
    return [WorkflowStepRead.model_validate(step) for step in steps]


@router.post(
    "/complete/{step_id}",
    response_model=WorkflowStepRead,
    summary="Complete workflow step",
    responses={404: {"description": "Workflow step not found"}},
)
async def complete_workflow_step(
    step_id: UUID,
    actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> WorkflowStepRead:
    step = await service.complete_step(step_id, actor)
    return WorkflowStepRead.model_validate(step)


@router.post(
    "/uncomplete/{step_id}",
    response_model=WorkflowStepRead,
    summary="Reopen workflow step",
    responses={404: {"description": "Workflow step not found"}},
)
async def uncomplete_workflow_step(
    step_id: UUID,
    actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> WorkflowStepRead:
    step = await service.reopen_step(step_id, actor)
    return WorkflowStepRead.model_validate(step)


@router.post(
    "/reset/{transaction_id}/{workflow_type}",
    response_model=list[WorkflowStepRead],
    summary="Reset workflow",
    description="Mark every step of the workflow as incomplete.",
    responses={
        400: {"description": "Unknown workflow type"},
        404: {"description": "Transaction or workflow not found"},
    },
)
async def reset_workflow(
    transaction_id: UUID,
    workflow_type: str,
    actor: CurrentActor,
    service: WorkflowStepServiceDep,
) -> list[WorkflowStepRead]:
    steps = await service.reset_workflow(transaction_id, workflow_type, actor)
    return [WorkflowStepRead.model_validate(step) for step in steps]
