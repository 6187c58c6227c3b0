"""Test data factories using polyfactory.

Usage:
    from tests.factories import TransactionFactory, WorkflowStepFactory

    transaction = TransactionFactory.build()
    steps = WorkflowStepFactory.workflow(transaction_id=transaction.id)
"""

from tests.factories.shop import BikeFactory, CustomerFactory, TransactionFactory, UserFactory
from tests.factories.workflow import WorkflowStepFactory

__all__ = [
    "BikeFactory",
    "CustomerFactory",
    "TransactionFactory",
    "UserFactory",
    "WorkflowStepFactory",
]
