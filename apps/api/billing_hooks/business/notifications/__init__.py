from billing_hooks.business.notifications.models import EmailNotificationIntent
from billing_hooks.business.notifications.service import NotificationService, notification_service

__all__ = [
    "EmailNotificationIntent",
    "NotificationService",
    "notification_service",
]
