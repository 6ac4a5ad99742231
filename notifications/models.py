# notifications/models.py
#
# Purpose:
# - One-way messages to a single user about a domain event
#   (booking request, status change, payment, system notice).
#
# Design:
# - FK to the auth User (the recipient).
# - The payload is stored as columns: booking, actor, action_required.
# - Immutable once created except for read/read_at: saving an existing
#   row only ever writes those two columns.
#
from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    BOOKING = "booking", "Booking"
    PAYMENT = "payment", "Payment"
    MESSAGE = "message", "Message"
    SYSTEM = "system", "System"


class Notification(models.Model):
    MUTABLE_FIELDS = ("read", "read_at")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(
        max_length=10,
        choices=NotificationType.choices,
        default=NotificationType.BOOKING,
    )
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    booking = models.ForeignKey(
        "booking.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    action_required = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["user", "read"], name="notification_user_read_idx")]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            kwargs["update_fields"] = self.MUTABLE_FIELDS
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.title} to {self.user} at {self.created_at:%Y-%m-%d %H:%M}"
