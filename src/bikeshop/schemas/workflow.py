"""Workflow step schemas for API request/response."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.bikeshop.models.enums import WorkflowType


class WorkflowStepRead(BaseModel):
    """Schema for reading a workflow step."""

    step_id: UUID = Field(validation_alias="id")
    transaction_id: UUID
    workflow_type: WorkflowType
    step_name: str
    step_order: int
    is_completed: bool
    created_by: UUID
    completed_by: UUID | None
    created_at: datetime
    completed_at: datetime | None
    updated_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class CurrentStep(BaseModel):
    """Lowest-order step that is still pending."""

    step_id: UUID
    step_name: str
    step_order: int


class WorkflowProgress(BaseModel):
    """Completion summary of one workflow on one transaction."""

    transaction_id: UUID
    workflow_type: WorkflowType
    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100)
    current_step: CurrentStep | None = None
    is_complete: bool = False
    steps: list[WorkflowStepRead] = Field(default_factory=list)


class WorkflowStepsQuery(BaseModel):
    """Optional filters for listing workflow steps."""

    transaction_id: UUID | None = None
    workflow_type: WorkflowType | None = None
    is_completed: bool | None = None
