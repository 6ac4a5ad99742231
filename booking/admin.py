from django.contrib import admin
from .models import Booking

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("reference", "client", "artisan", "service", "service_date", "status", "amount")
    list_filter = ("status", "payment_method")
    search_fields = ("reference", "client__username", "artisan__username", "service")
    # status only changes through BookingManager so notifications go out
    readonly_fields = ("reference", "status", "version", "created_at", "updated_at")
