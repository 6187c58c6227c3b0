"""Notification schemas."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.bikeshop.models.base import utc_now


class NotificationKind(str, Enum):
    BUILD_COMPLETE = "build_complete"
    RESERVATION_COMPLETE = "reservation_complete"
    SALE_COMPLETE = "sale_complete"
    STEP_COMPLETE = "step_complete"
    MANUAL = "manual"


class NotificationRequest(BaseModel):
    """A rendered, channel-agnostic notification.

    Summaries are always non-empty strings; missing bikes and customers are
    rendered as placeholders by the dispatcher.
    """

    kind: NotificationKind
    transaction_id: UUID | None = None
    transaction_num: str = "Unknown"
    step_name: str | None = None
    bike_summary: str = "Unknown bike"
    customer_summary: str = "Unknown customer"
    total_cost: float = 0.0
    message: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class ManualNotificationCreate(BaseModel):
    """Schema for sending a free-text notification."""

    message: str = Field(min_length=1, max_length=4000)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty or whitespace only")
        return v


class NotificationResult(BaseModel):
    success: bool
    message: str
