"""
NotificationDispatcher
----------------------
Persists notifications and answers the recipient-side queries.

- dispatch() is a single atomic insert. It either stores the whole record
  or raises; callers that treat notifications as best-effort (the booking
  engine) catch and log.
- mark_read() / mark_all_read() are idempotent.
"""

import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from .models import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationNotFound(NotFound):
    default_detail = "Notification not found."


class NotificationDispatcher:
    default_limit = 50

    @transaction.atomic
    def dispatch(
        self,
        recipient,
        title,
        message,
        type=NotificationType.BOOKING,
        booking=None,
        actor=None,
        action_required=False,
    ) -> Notification:
        """
        Create one notification addressed to `recipient`.

        Args:
            recipient: User receiving the notification
            title / message: display text
            type: booking | payment | message | system
            booking / actor / action_required: structured payload
        """
        notification = Notification.objects.create(
            user=recipient,
            title=title,
            message=message,
            type=type or NotificationType.BOOKING,
            booking=booking,
            actor=actor,
            action_required=bool(action_required),
        )
        logger.info("Notification %s (%s) created for user %s", notification.pk, title, recipient.pk)
        return notification

    def for_user(self, user, limit=None):
        qs = Notification.objects.filter(user=user).order_by("-created_at", "-id")
        return qs[: limit or self.default_limit]

    def mark_read(self, user, notification_id) -> Notification:
        notification = Notification.objects.filter(pk=notification_id, user=user).first()
        if notification is None:
            raise NotificationNotFound()
        if not notification.read:
            notification.read = True
            notification.read_at = timezone.now()
            notification.save()
        return notification

    def mark_all_read(self, user) -> int:
        return Notification.objects.filter(user=user, read=False).update(
            read=True, read_at=timezone.now()
        )
