# booking/models.py
#
# Purpose:
# - Core domain model for the marketplace: one Booking per service engagement
#   between a client (the booker) and an artisan (the provider).
#
# Design highlights:
# - Both parties are auth Users; a user can be client on one booking and
#   artisan on another. client != artisan is enforced in clean() and by
#   BookingManager before anything is written.
# - status is lowercase and changes only through BookingManager.apply_action
#   (see booking/services/lifecycle.py for the transition table).
# - version is bumped on every status change; updates are conditional on the
#   version that was read, so two racing transitions cannot both win.
# - Bookings are never deleted: cancellation is a terminal status.
#
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models


TIME_RE = r"^([01]\d|2[0-3]):[0-5]\d$"

# Amounts are stored in naira with kobo precision
AMOUNT_MAX_DIGITS = 18
AMOUNT_DECIMAL_PLACES = 2


class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    DECLINED = "declined", "Declined"
    IN_PROGRESS = "in_progress", "In progress"
    PENDING_CONFIRMATION = "pending_confirmation", "Pending confirmation"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    TRANSFER = "transfer", "Bank transfer"
    ONLINE = "online", "Online"


# -------------------------
# Booking record
# -------------------------
class Booking(models.Model):
    """
    A scheduled service engagement.

    - reference: human-readable code shown to users (NACO-XXXXXXXXX)
    - service_time: 24h "HH:MM" string, kept as typed by the client
    - amount: only a tag for the agreed price, no payment is processed here
    """
    reference = models.CharField(max_length=32, unique=True, editable=False)

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings_made",
    )
    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings_received",
    )

    service = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    service_date = models.DateField()
    service_time = models.CharField(
        max_length=5,
        validators=[RegexValidator(TIME_RE, "Time must use the 24h HH:MM format.")],
    )
    amount = models.DecimalField(
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        validators=[MinValueValidator(0)],
    )
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    location = models.CharField(max_length=255, blank=True, default="")

    status = models.CharField(
        max_length=24,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
        help_text="Booking lifecycle status",
    )
    version = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.reference}: {self.service} ({self.status})"

    def clean(self):
        if self.client_id and self.client_id == self.artisan_id:
            raise ValidationError("Cannot book yourself.")

    def party_of(self, user) -> str | None:
        """Return "client", "artisan" or None for the given user."""
        user_id = getattr(user, "pk", user)
        if user_id == self.client_id:
            return "client"
        if user_id == self.artisan_id:
            return "artisan"
        return None

    def other_party(self, user):
        """The counterparty of `user` on this booking."""
        if self.party_of(user) == "client":
            return self.artisan
        return self.client
