# booking/views.py
#
# Purpose:
# - JSON API for the booking lifecycle.
# - All business rules live in BookingManager; views only translate HTTP.
# - Domain errors are DRF APIExceptions and propagate as-is
#   (400 validation, 403 wrong actor / self-booking, 404, 409 conflict).
#
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ParseError
from rest_framework.response import Response

from .serializers import BookingSerializer
from .services.booking_manager import BookingManager


class BookingViewSet(viewsets.ViewSet):
    """
    Endpoints:
    - POST /bookings                     create (client = request.user)
    - GET  /bookings                     bookings where the caller is a party
    - PUT  /bookings/{id}/{action}       accept | decline | start | complete |
                                         confirm | reject | cancel
    """
    lookup_value_regex = r"\d+"
    manager = BookingManager()

    def list(self, request):
        bookings = self.manager.bookings_for(request.user)
        return Response(BookingSerializer(bookings, many=True).data)

    def create(self, request):
        booking = self.manager.create_booking(request.user, request.data)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put"], url_path=r"(?P<action_name>[^/.]+)")
    def transition(self, request, pk=None, action_name=None):
        booking = self.manager.apply_action(
            booking_id=pk,
            actor=request.user,
            action=action_name,
            expected_version=self._expected_version(request),
        )
        return Response(BookingSerializer(booking).data)

    def _expected_version(self, request):
        """Version the caller saw, from If-Match or the body; None if not sent."""
        raw = request.headers.get("If-Match")
        if raw is None and hasattr(request.data, "get"):
            raw = request.data.get("version")
        if raw in (None, ""):
            return None
        try:
            return int(str(raw).strip().strip('"'))
        except ValueError:
            raise ParseError("version must be an integer.")
