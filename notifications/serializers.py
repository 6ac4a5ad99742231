from django.contrib.auth import get_user_model
from rest_framework import serializers

from booking.models import Booking
from .models import Notification, NotificationType

User = get_user_model()


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "title", "message", "type", "read", "read_at", "created_at"]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["_id"] = data["id"]
        data["readAt"] = data["read_at"]
        data["created"] = data["created_at"]
        data["createdAt"] = data["created_at"]
        data["data"] = {
            "bookingId": instance.booking_id,
            "userId": instance.actor_id,
            "actionRequired": instance.action_required,
        }
        return data


class NotificationPayloadSerializer(serializers.Serializer):
    bookingId = serializers.PrimaryKeyRelatedField(
        queryset=Booking.objects.all(), required=False, allow_null=True
    )
    userId = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True
    )
    actionRequired = serializers.BooleanField(required=False, default=False)


class NotificationCreateSerializer(serializers.Serializer):
    """Body of POST /notifications (used by other collaborators)."""
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    title = serializers.CharField(max_length=200)
    message = serializers.CharField()
    type = serializers.ChoiceField(
        choices=NotificationType.choices, required=False, default=NotificationType.BOOKING
    )
    data = NotificationPayloadSerializer(required=False)
