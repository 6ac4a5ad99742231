from django.contrib import admin
from notifications.models import Notification

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'title', 'type', 'read', 'created_at')
    list_filter = ('type', 'read', 'created_at')
    search_fields = ('user__username', 'title', 'message')
    readonly_fields = ('user', 'title', 'message', 'type', 'booking', 'actor', 'action_required', 'created_at')
