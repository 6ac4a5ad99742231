"""
lifecycle.py
------------
The booking state machine, as data.

Each BookingAction maps to one Transition describing:
- which statuses it may be applied from,
- the status it moves the booking to,
- which party ("client" / "artisan") may trigger it,
- the notification sent to the counterparty of whoever triggered it.

BookingManager.apply_action is the only code that reads this table.
"""

from dataclasses import dataclass
from enum import Enum

from ..models import BookingStatus


CLIENT = "client"
ARTISAN = "artisan"


class BookingAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    START = "start"
    COMPLETE = "complete"
    CONFIRM = "confirm"
    REJECT = "reject"
    CANCEL = "cancel"

    @classmethod
    def parse(cls, value):
        """Return the action for `value`, or None if it is not one."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Transition:
    from_states: frozenset
    to_state: str
    actors: tuple
    title: str
    message: str
    action_required: bool = False

    def allows(self, party) -> bool:
        return party in self.actors

    def applies_to(self, status) -> bool:
        return status in self.from_states

    def render_message(self, booking, actor) -> str:
        return self.message.format(
            service=booking.service,
            reference=booking.reference,
            actor=display_name(actor),
        )


TRANSITIONS = {
    BookingAction.ACCEPT: Transition(
        from_states=frozenset({BookingStatus.PENDING}),
        to_state=BookingStatus.CONFIRMED,
        actors=(ARTISAN,),
        title="Booking Confirmed",
        message="Your booking for {service} has been accepted",
    ),
    BookingAction.DECLINE: Transition(
        from_states=frozenset({BookingStatus.PENDING}),
        to_state=BookingStatus.DECLINED,
        actors=(ARTISAN,),
        title="Booking Declined",
        message="Your booking for {service} was declined",
    ),
    BookingAction.START: Transition(
        from_states=frozenset({BookingStatus.CONFIRMED}),
        to_state=BookingStatus.IN_PROGRESS,
        actors=(ARTISAN,),
        title="Job Started",
        message="Your artisan has started working on your job",
    ),
    BookingAction.COMPLETE: Transition(
        from_states=frozenset({BookingStatus.IN_PROGRESS}),
        to_state=BookingStatus.PENDING_CONFIRMATION,
        actors=(ARTISAN,),
        title="Job Completed",
        message="Please review and confirm the completed work",
        action_required=True,
    ),
    BookingAction.CONFIRM: Transition(
        from_states=frozenset({BookingStatus.PENDING_CONFIRMATION}),
        to_state=BookingStatus.COMPLETED,
        actors=(CLIENT,),
        title="Job Confirmed",
        message="Client has confirmed job completion",
    ),
    BookingAction.REJECT: Transition(
        from_states=frozenset({BookingStatus.PENDING_CONFIRMATION}),
        to_state=BookingStatus.IN_PROGRESS,
        actors=(CLIENT,),
        title="Job Completion Rejected",
        message="The client has requested additional work on this job",
        action_required=True,
    ),
    BookingAction.CANCEL: Transition(
        from_states=frozenset({
            BookingStatus.PENDING,
            BookingStatus.CONFIRMED,
            BookingStatus.IN_PROGRESS,
        }),
        to_state=BookingStatus.CANCELLED,
        actors=(CLIENT, ARTISAN),
        title="Booking Cancelled",
        message="{actor} cancelled the booking for {service}",
    ),
}

NEW_BOOKING_TITLE = "New Booking Request"
NEW_BOOKING_MESSAGE = "{client} has requested your {service} service for {date} at {time}"


def display_name(user) -> str:
    return user.get_full_name() or user.get_username()
