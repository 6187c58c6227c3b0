"""Repository layer - data access abstraction."""

from src.bikeshop.repositories.base import BaseRepository
from src.bikeshop.repositories.transaction_context_repository import (
    IsolatedTransactionContextProvider,
    TransactionContextRepository,
)
from src.bikeshop.repositories.workflow_step_repository import WorkflowStepRepository

__all__ = [
    "BaseRepository",
    "IsolatedTransactionContextProvider",
    "TransactionContextRepository",
    "WorkflowStepRepository",
]
