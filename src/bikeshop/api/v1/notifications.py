"""Manual notification endpoint."""

from fastapi import APIRouter, HTTPException, Request, status

from src.bikeshop.api.dependencies import CurrentActor, OutboxDep
from src.bikeshop.core.exceptions import NotificationDispatchError
from src.bikeshop.core.logging import get_logger
from src.bikeshop.core.rate_limit import MANUAL_NOTIFICATION_LIMIT, limiter
from src.bikeshop.schemas.notification import (
    ManualNotificationCreate,
    NotificationKind,
    NotificationRequest,
    NotificationResult,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post(
    "/slack",
    response_model=NotificationResult,
    summary="Send Slack message",
    description="Send a free-text message to the shop's Slack channel.",
    responses={
        429: {"description": "Too many messages from this client"},
        502: {"description": "Slack rejected the message"},
    },
)
@limiter.limit(MANUAL_NOTIFICATION_LIMIT)
async def send_slack_notification(
    request: Request,
    body: ManualNotificationCreate,
    actor: CurrentActor,
    outbox: OutboxDep,
) -> NotificationResult:
    notification = NotificationRequest(kind=NotificationKind.MANUAL, message=body.message)
    try:
        await outbox.send_now(notification)
    except NotificationDispatchError as e:
        logger.warning("Manual notification failed", actor_id=str(actor), error=e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e
    return NotificationResult(success=True, message="Notification sent successfully")
