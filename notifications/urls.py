from django.urls import re_path

from .views import NotificationListView, NotificationReadAllView, NotificationReadView

# Trailing slash optional: the frontend calls /notifications, DRF clients /notifications/
urlpatterns = [
    re_path(r"^notifications/?$", NotificationListView.as_view(), name="notification-list"),
    re_path(r"^notifications/read/?$", NotificationReadAllView.as_view(), name="notification-read-all"),
    re_path(r"^notifications/(?P<pk>\d+)/read/?$", NotificationReadView.as_view(), name="notification-read"),
]
