# naco_marketplace/urls.py
#
# Purpose:
# - Project URL router.
# - The JSON API is mounted at the root because the frontend and the offline
#   worker address it as /bookings and /notifications (no /api/ prefix).
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    path("", include("booking.urls")),
    path("", include("notifications.urls")),
]
