from django.contrib import admin
from .models import OutboxEntry, AnalyticsEvent, CachedResponse

@admin.register(OutboxEntry)
class OutboxEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "method", "url", "is_json", "created_at")
    list_filter = ("method",)

@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ("id", "created_at")

@admin.register(CachedResponse)
class CachedResponseAdmin(admin.ModelAdmin):
    list_display = ("partition", "key", "status_code", "updated_at")
    list_filter = ("partition",)
    search_fields = ("key",)
