"""Workflow step model - one row per step of a transaction's workflow."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.bikeshop.models.base import utc_now


class WorkflowStep(SQLModel, table=True):
    """A step definition snapshot bound to a transaction.

    step_name/step_order/workflow_type are copied from the definition at
    creation time and never follow later definition changes.
    """

    __tablename__ = "workflow_steps"
    __table_args__ = (
        UniqueConstraint(
            "transaction_id",
            "workflow_type",
            "step_order",
            name="uq_workflow_steps_transaction_workflow_order",
        ),
        Index("ix_workflow_steps_transaction_workflow", "transaction_id", "workflow_type"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    transaction_id: UUID = Field(foreign_key="transactions.id", ondelete="CASCADE", index=True)
    workflow_type: str = Field(max_length=50, index=True)
    step_name: str = Field(max_length=100)
    step_order: int = Field(ge=1)
    is_completed: bool = Field(default=False)
    created_by: UUID = Field(foreign_key="users.id")
    completed_by: UUID | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = Field(default=None)
    updated_at: datetime = Field(default_factory=utc_now)
