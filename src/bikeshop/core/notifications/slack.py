"""Slack incoming-webhook channel using httpx."""

import time
from typing import Any

import httpx

from src.bikeshop.core.config import Settings, get_settings
from src.bikeshop.core.exceptions import NotificationDispatchError
from src.bikeshop.core.logging import get_logger
from src.bikeshop.schemas.notification import NotificationKind, NotificationRequest

logger = get_logger(__name__)

# Per-kind message styling: (headline, icon_emoji, attachment color, footer)
_STYLES: dict[NotificationKind, tuple[str, str, str, str]] = {
    NotificationKind.BUILD_COMPLETE: (
        "🚴 Bike Build Complete!",
        ":bike:",
        "good",
        "Ready for inspection and safety check! 🔧✅",
    ),
    NotificationKind.RESERVATION_COMPLETE: (
        "📋 Bike Reserved!",
        ":clipboard:",
        "warning",
        "Customer deposit processed",
    ),
    NotificationKind.SALE_COMPLETE: (
        "💰 Sale Complete!",
        ":money_with_wings:",
        "#36a64f",
        "Bike successfully sold! 🎉",
    ),
    NotificationKind.STEP_COMPLETE: (
        "✅ Workflow Step Complete",
        ":white_check_mark:",
        "#0066cc",
        "Workflow progress updated",
    ),
    NotificationKind.MANUAL: ("", ":bike:", "#cccccc", ""),
}


def _field(title: str, value: str, short: bool = True) -> dict[str, Any]:
    return {"title": title, "value": value, "short": short}


def _fields_for(request: NotificationRequest) -> list[dict[str, Any]]:
    transaction = _field("Transaction #", request.transaction_num)
    match request.kind:
        case NotificationKind.BUILD_COMPLETE:
            return [
                transaction,
                _field("Bike", request.bike_summary),
                _field("Customer", request.customer_summary, short=False),
            ]
        case NotificationKind.RESERVATION_COMPLETE:
            return [
                transaction,
                _field("Customer", request.customer_summary),
                _field("Bike", request.bike_summary, short=False),
            ]
        case NotificationKind.SALE_COMPLETE:
            return [
                transaction,
                _field("Final Price", f"${request.total_cost:.2f}"),
                _field("Customer", request.customer_summary, short=False),
            ]
        case NotificationKind.STEP_COMPLETE:
            return [
                transaction,
                _field("Step", request.step_name or "Unknown step"),
                _field("Bike", request.bike_summary),
                _field("Customer", request.customer_summary),
            ]
        case _:
            return []


def build_slack_payload(
    request: NotificationRequest,
    username: str,
    channel: str | None = None,
) -> dict[str, Any]:
    """Render a notification request as a Slack webhook message."""
    headline, icon, color, footer = _STYLES[request.kind]

    if request.kind is NotificationKind.MANUAL:
        payload: dict[str, Any] = {
            "text": request.message or "",
            "username": username,
            "icon_emoji": icon,
        }
    else:
        text = headline
        if request.kind is NotificationKind.STEP_COMPLETE and request.step_name:
            text = f"{headline}: {request.step_name}"
        payload = {
            "text": text,
            "username": username,
            "icon_emoji": icon,
            "attachments": [
                {
                    "color": color,
                    "fields": _fields_for(request),
                    "footer": footer,
                    "ts": int(time.time()),
                }
            ],
        }

    if channel:
        payload["channel"] = channel
    return payload


class SlackNotificationChannel:
    """Posts notifications to a Slack incoming webhook.

    When notifications are disabled the message is logged and skipped.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._owns_client = client is None

        if not self.settings.slack_notifications_enabled:
            logger.warning("Slack notifications are disabled")
        elif not self.settings.slack_webhook_url:
            logger.warning("SLACK_WEBHOOK_URL is not set - Slack notifications will fail")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.notification_timeout_seconds)
        return self._client

    async def send(self, request: NotificationRequest) -> None:
        """Send one notification.

        Raises:
            NotificationDispatchError: If the webhook is missing or Slack rejects the post.
        """
        if not self.settings.slack_notifications_enabled:
            logger.info(
                "Slack notifications disabled - notification not sent",
                kind=request.kind.value,
                transaction_id=str(request.transaction_id),
            )
            return

        webhook_url = self.settings.slack_webhook_url
        if not webhook_url:
            raise NotificationDispatchError("Slack webhook URL not configured")

        payload = build_slack_payload(
            request,
            username=self.settings.slack_username,
            channel=self.settings.slack_channel_override,
        )

        try:
            response = await self._get_client().post(webhook_url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationDispatchError(f"Slack request failed: {e}") from e

        if response.is_error:
            raise NotificationDispatchError(
                f"Slack API error: {response.status_code} {response.reason_phrase}"
            )

    async def aclose(self) -> None:
        """Close the HTTP client if this channel created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
