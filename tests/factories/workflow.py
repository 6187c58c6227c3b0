"""Workflow step factories."""

from polyfactory import Use

from src.bikeshop.models import WorkflowStep, WorkflowType
from src.bikeshop.services.workflow_definitions import steps_for
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class WorkflowStepFactory(BaseFactory):
    """Factory for generating pending workflow steps."""

    __model__ = WorkflowStep

    id = Use(generate_uuid)
    transaction_id = Use(generate_uuid)
    workflow_type = WorkflowType.BIKE_SALES.value
    step_name = "BikeSpec"
    step_order = 1
    is_completed = False
    created_by = Use(generate_uuid)
    completed_by = None
    created_at = Use(utc_now)
    completed_at = None
    updated_at = Use(utc_now)

    @classmethod
    def completed(cls, **kwargs):
        """Create a completed step."""
        completed_by = kwargs.pop("completed_by", generate_uuid())
        return cls.build(
            is_completed=True,
            completed_by=completed_by,
            completed_at=utc_now(),
            **kwargs,
        )

    @classmethod
    def workflow(cls, workflow_type: WorkflowType = WorkflowType.BIKE_SALES, **kwargs):
        """Create one pending step per canonical definition of a workflow."""
        return [
            cls.build(
                workflow_type=workflow_type.value,
                step_name=definition.step_name,
                step_order=definition.step_order,
                **kwargs,
            )
            for definition in steps_for(workflow_type)
        ]
