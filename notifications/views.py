# notifications/views.py
#
# Endpoints (all authenticated, always scoped to request.user):
# - POST /notifications            create one for any user
# - GET  /notifications            newest 50 for the caller
# - PUT  /notifications/<id>/read  mark one read (idempotent)
# - PUT  /notifications/read       mark all of the caller's unread as read
#
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import NotificationCreateSerializer, NotificationSerializer
from .services import NotificationDispatcher


class NotificationListView(APIView):
    dispatcher = NotificationDispatcher()

    def get(self, request):
        notifications = self.dispatcher.for_user(request.user)
        return Response(NotificationSerializer(notifications, many=True).data)

    def post(self, request):
        serializer = NotificationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        values = serializer.validated_data
        payload = values.get("data") or {}

        notification = self.dispatcher.dispatch(
            recipient=values["user"],
            title=values["title"],
            message=values["message"],
            type=values["type"],
            booking=payload.get("bookingId"),
            actor=payload.get("userId"),
            action_required=payload.get("actionRequired", False),
        )
        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)


class NotificationReadView(APIView):
    dispatcher = NotificationDispatcher()

    def put(self, request, pk):
        notification = self.dispatcher.mark_read(request.user, pk)
        return Response(NotificationSerializer(notification).data)


class NotificationReadAllView(APIView):
    dispatcher = NotificationDispatcher()

    def put(self, request):
        updated = self.dispatcher.mark_all_read(request.user)
        return Response({"message": "All notifications marked as read", "updated": updated})
