from src.bikeshop.schemas.notification import (
    ManualNotificationCreate,
    NotificationKind,
    NotificationRequest,
    NotificationResult,
)
from src.bikeshop.schemas.transaction import BikeSummary, CustomerSummary, TransactionContext
from src.bikeshop.schemas.workflow import (
    CurrentStep,
    WorkflowProgress,
    WorkflowStepRead,
    WorkflowStepsQuery,
)

__all__ = [
    # Notification
    "ManualNotificationCreate",
    "NotificationKind",
    "NotificationRequest",
    "NotificationResult",
    # Transaction
    "BikeSummary",
    "CustomerSummary",
    "TransactionContext",
    # Workflow
    "CurrentStep",
    "WorkflowProgress",
    "WorkflowStepRead",
    "WorkflowStepsQuery",
]
