"""Model exports.

Import from here: `from src.bikeshop.models import WorkflowStep, Transaction`
"""

from src.bikeshop.models.base import utc_now
from src.bikeshop.models.bike import Bike
from src.bikeshop.models.customer import Customer
from src.bikeshop.models.enums import BikeCondition, WorkflowType
from src.bikeshop.models.transaction import Transaction
from src.bikeshop.models.user import User
from src.bikeshop.models.workflow import WorkflowStep

__all__ = [
    # Enums
    "BikeCondition",
    "WorkflowType",
    # Models
    "Bike",
    "Customer",
    "Transaction",
    "User",
    "WorkflowStep",
    # Helpers
    "utc_now",
]
