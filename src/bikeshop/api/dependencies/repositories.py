"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.bikeshop.api.dependencies.db import DBSession
from src.bikeshop.repositories import WorkflowStepRepository


def get_workflow_step_repository(session: DBSession) -> WorkflowStepRepository:
    """Get workflow step repository bound to the request session."""
    return WorkflowStepRepository(session)


WorkflowStepRepo = Annotated[WorkflowStepRepository, Depends(get_workflow_step_repository)]
