from src.bikeshop.services.notification_dispatcher import NotificationDispatcher
from src.bikeshop.services.workflow_step_service import WorkflowStepService

__all__ = ["NotificationDispatcher", "WorkflowStepService"]
