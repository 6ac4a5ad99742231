"""
Domain errors raised by the booking engine.

They are DRF APIExceptions, so views can let them propagate and DRF renders
a structured JSON body with the matching status code.
"""

from rest_framework import exceptions, status


class ValidationError(exceptions.ValidationError):
    """Every missing or malformed booking field, reported together."""

    def __init__(self, fields: dict):
        self.fields = fields
        super().__init__({"error": "Validation failed", "fields": fields})


class AuthorizationError(exceptions.PermissionDenied):
    default_detail = "Not authorized for this action."
    default_code = "not_authorized"


class NotFoundError(exceptions.NotFound):
    default_detail = "Booking not found."


class ConflictError(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state."
    default_code = "conflict"


class SelfBookingError(ConflictError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Cannot book yourself."
    default_code = "self_booking"


class InvalidTransitionError(ConflictError):
    default_code = "invalid_transition"

    def __init__(self, action, current_status):
        self.action = action
        self.current_status = current_status
        super().__init__(f"Cannot {action} a booking that is {current_status}.")


class StaleBookingError(ConflictError):
    default_detail = "Booking was modified by another request. Reload and try again."
    default_code = "stale_version"


class UnknownActionError(exceptions.ParseError):
    default_detail = "Invalid action."
    default_code = "invalid_action"
