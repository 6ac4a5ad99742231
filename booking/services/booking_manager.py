"""
booking_manager.py
------------------
Coordinates booking creation, status transitions and per-user listing.

Rules:
- Creation validates every field at once, forbids self-booking, stamps a
  unique reference and notifies the artisan.
- A transition is allowed only for the party named in the transition table
  and only from the statuses listed there.
- The status write is one conditional UPDATE on (id, version); a concurrent
  writer that got there first makes this call fail with StaleBookingError.
- The counterparty notification is sent after the status is stored.
  It is best-effort: a failure is logged and never undoes the transition.
"""

import logging
import secrets
import string

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from notifications.services import NotificationDispatcher

from ..exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    SelfBookingError,
    StaleBookingError,
    UnknownActionError,
    ValidationError,
)
from ..models import Booking, BookingStatus
from ..serializers import BookingCreateSerializer
from .lifecycle import (
    NEW_BOOKING_MESSAGE,
    NEW_BOOKING_TITLE,
    TRANSITIONS,
    BookingAction,
    display_name,
)

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 9


def generate_reference(prefix=None) -> str:
    prefix = prefix or getattr(settings, "NACO_BOOKING_REFERENCE_PREFIX", "NACO")
    code = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
    return f"{prefix}-{code}"


class BookingManager:
    def __init__(self, notifier=None):
        self.notifier = notifier or NotificationDispatcher()

    # ---------- creation ----------

    def create_booking(self, client, data):
        """
        Validate and store a new booking for `client`.

        Args:
            client: the authenticated User placing the booking
            data: request payload (canonical or legacy field names)

        Raises:
            ValidationError: with every invalid/missing field
            SelfBookingError: if the artisan is the client
        """
        serializer = BookingCreateSerializer(data=data)
        if not serializer.is_valid():
            logger.info("Booking validation failed for user %s: %s", client.pk, serializer.errors)
            raise ValidationError(serializer.errors)
        values = serializer.validated_data

        artisan = values["artisan"]
        if artisan.pk == client.pk:
            logger.info("Self-booking prevented for user %s", client.pk)
            raise SelfBookingError()

        with transaction.atomic():
            reference = self._unique_reference()
            booking = Booking.objects.create(
                reference=reference,
                client=client,
                artisan=artisan,
                service=values["service"],
                description=values.get("description", ""),
                service_date=values["service_date"],
                service_time=values["service_time"],
                amount=values["amount"],
                payment_method=values["payment_method"],
                location=values.get("location", ""),
                status=BookingStatus.PENDING,
            )
        logger.info("Booking %s created by user %s for artisan %s", booking.reference, client.pk, artisan.pk)

        self._notify(
            recipient=artisan,
            title=NEW_BOOKING_TITLE,
            message=NEW_BOOKING_MESSAGE.format(
                client=display_name(client),
                service=booking.service,
                date=booking.service_date.isoformat(),
                time=booking.service_time,
            ),
            booking=booking,
            actor=client,
            action_required=True,
        )
        return booking

    def _unique_reference(self) -> str:
        reference = generate_reference()
        while Booking.objects.filter(reference=reference).exists():
            reference = generate_reference()
        return reference

    # ---------- transitions ----------

    def apply_action(self, booking_id, actor, action, expected_version=None):
        """
        Apply one lifecycle action on behalf of `actor`.

        Args:
            booking_id: primary key of the booking
            actor: the authenticated User asking for the change
            action: BookingAction or its string name
            expected_version: version the caller last saw (optional)

        Raises:
            NotFoundError, UnknownActionError, AuthorizationError,
            InvalidTransitionError, StaleBookingError
        """
        booking = (
            Booking.objects.select_related("client", "artisan")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            raise NotFoundError()

        parsed = action if isinstance(action, BookingAction) else BookingAction.parse(action)
        if parsed is None:
            raise UnknownActionError()
        rule = TRANSITIONS[parsed]

        if not rule.allows(booking.party_of(actor)):
            logger.info(
                "User %s not allowed to %s booking %s", actor.pk, parsed.value, booking.reference
            )
            raise AuthorizationError()

        if expected_version is not None and int(expected_version) != booking.version:
            raise StaleBookingError()

        if not rule.applies_to(booking.status):
            raise InvalidTransitionError(parsed.value, booking.status)

        with transaction.atomic():
            updated = Booking.objects.filter(pk=booking.pk, version=booking.version).update(
                status=rule.to_state,
                version=F("version") + 1,
                updated_at=timezone.now(),
            )
        if not updated:
            raise StaleBookingError()

        previous = booking.status
        booking.refresh_from_db()
        logger.info(
            "Booking %s: %s -> %s by user %s",
            booking.reference, previous, booking.status, actor.pk,
        )

        self._notify(
            recipient=booking.other_party(actor),
            title=rule.title,
            message=rule.render_message(booking, actor),
            booking=booking,
            actor=actor,
            action_required=rule.action_required,
        )
        return booking

    # ---------- queries ----------

    def bookings_for(self, user):
        """Every booking where `user` is either party, newest first."""
        return (
            Booking.objects.filter(Q(client=user) | Q(artisan=user))
            .select_related("client", "artisan")
            .order_by("-created_at", "-id")
        )

    # ---------- helpers ----------

    def _notify(self, recipient, title, message, booking, actor, action_required=False):
        # Own savepoint so a failed insert cannot poison an outer transaction.
        try:
            with transaction.atomic():
                self.notifier.dispatch(
                    recipient=recipient,
                    title=title,
                    message=message,
                    type="booking",
                    booking=booking,
                    actor=actor,
                    action_required=action_required,
                )
        except Exception:
            logger.exception(
                "Failed to notify user %s about booking %s", recipient.pk, booking.reference
            )
            return False
        return True
