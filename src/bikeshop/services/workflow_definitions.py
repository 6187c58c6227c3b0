"""Workflow definition registry.

Maps each workflow type to its canonical, ordered list of steps. The table is
static; `verify_definitions()` is run once at startup to assert every
registered type has dense 1..N ordering.
"""

from dataclasses import dataclass

from src.bikeshop.core.exceptions import UnknownWorkflowType, WorkflowDefinitionError
from src.bikeshop.models.enums import WorkflowType


@dataclass(frozen=True)
class StepDefinition:
    workflow_type: WorkflowType
    step_name: str
    step_order: int


def _define(workflow_type: WorkflowType, *step_names: str) -> tuple[StepDefinition, ...]:
    return tuple(
        StepDefinition(workflow_type=workflow_type, step_name=name, step_order=order)
        for order, name in enumerate(step_names, start=1)
    )


WORKFLOW_DEFINITIONS: dict[WorkflowType, tuple[StepDefinition, ...]] = {
    WorkflowType.BIKE_SALES: _define(
        WorkflowType.BIKE_SALES,
        "BikeSpec",
        "Build",
        "Creation",
        "Reservation",
        "Checkout",
    ),
    WorkflowType.REPAIR_PROCESS: _define(
        WorkflowType.REPAIR_PROCESS,
        "Assessment",
        "Parts Ordering",
        "Repair Work",
        "Quality Check",
    ),
}


def parse_workflow_type(value: WorkflowType | str) -> WorkflowType:
    """Coerce a raw identifier to a registered WorkflowType.

    Raises:
        UnknownWorkflowType: If the value is not a registered workflow type.
    """
    if isinstance(value, WorkflowType):
        workflow_type = value
    else:
        try:
            workflow_type = WorkflowType(value)
        except ValueError as e:
            raise UnknownWorkflowType(value) from e
    if workflow_type not in WORKFLOW_DEFINITIONS:
        raise UnknownWorkflowType(value)
    return workflow_type


def steps_for(workflow_type: WorkflowType | str) -> list[StepDefinition]:
    """Return the canonical steps for a workflow type, sorted by step_order.

    Raises:
        UnknownWorkflowType: If the workflow type is not registered.
    """
    definitions = WORKFLOW_DEFINITIONS[parse_workflow_type(workflow_type)]
    return sorted(definitions, key=lambda d: d.step_order)


def verify_definitions(
    definitions: dict[WorkflowType, tuple[StepDefinition, ...]] | None = None,
) -> None:
    """Startup self-check over every registered workflow type.

    Raises:
        WorkflowDefinitionError: If a type has no definition, an empty step
            list, a gap or repeat in step_order, a duplicate step name, or a
            step filed under the wrong type.
    """
    if definitions is None:
        definitions = WORKFLOW_DEFINITIONS

    for workflow_type in WorkflowType:
        steps = definitions.get(workflow_type)
        if not steps:
            raise WorkflowDefinitionError(f"No steps defined for workflow {workflow_type.value}")

        orders = sorted(step.step_order for step in steps)
        if orders != list(range(1, len(steps) + 1)):
            raise WorkflowDefinitionError(
                f"Workflow {workflow_type.value} step orders must be 1..{len(steps)}, "
                f"got {orders}"
            )

        names = [step.step_name.lower() for step in steps]
        if len(set(names)) != len(names):
            raise WorkflowDefinitionError(
                f"Workflow {workflow_type.value} has duplicate step names"
            )

        if any(step.workflow_type != workflow_type for step in steps):
            raise WorkflowDefinitionError(
                f"Workflow {workflow_type.value} contains steps of another workflow type"
            )
