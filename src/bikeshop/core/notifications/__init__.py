"""Notification delivery - Slack channel and background outbox."""

from src.bikeshop.core.notifications.channel import NotificationChannel
from src.bikeshop.core.notifications.outbox import NotificationOutbox
from src.bikeshop.core.notifications.slack import SlackNotificationChannel, build_slack_payload

__all__ = [
    "NotificationChannel",
    "NotificationOutbox",
    "SlackNotificationChannel",
    "build_slack_payload",
]
