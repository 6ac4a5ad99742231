# booking/urls.py
#
# Purpose:
# - Expose the booking REST API via a DRF router.
# - No trailing slashes: the frontend calls /bookings and /bookings/<id>/<action>.
#
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import BookingViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
