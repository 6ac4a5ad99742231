from decimal import ROUND_HALF_UP, Decimal

from django.contrib.auth import get_user_model
from django.core.validators import RegexValidator
from rest_framework import serializers

from .models import AMOUNT_DECIMAL_PLACES, AMOUNT_MAX_DIGITS, Booking, PaymentMethod, TIME_RE
from .services.lifecycle import display_name

User = get_user_model()

# Older frontends post these names; map them onto the canonical field.
FIELD_ALIASES = {
    "artisan": ("bookedArtisanId", "artisanId", "artisan_id"),
    "service_date": ("date",),
    "service_time": ("time",),
    "payment_method": ("paymentMethod",),
}


class AmountField(serializers.DecimalField):
    """Price tag; digits past the kobo are rounded half-up instead of rejected."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", AMOUNT_MAX_DIGITS)
        kwargs.setdefault("decimal_places", AMOUNT_DECIMAL_PLACES)
        super().__init__(**kwargs)
        self.step = Decimal(1).scaleb(-self.decimal_places)

    def validate_precision(self, value):
        # Out-of-range magnitudes are left for max_digits to report
        if value.adjusted() < self.max_digits - self.decimal_places:
            value = value.quantize(self.step, rounding=ROUND_HALF_UP)
        return super().validate_precision(value)


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name", "email"]

    def get_name(self, obj):
        return display_name(obj)


class BookingCreateSerializer(serializers.Serializer):
    """
    Input validation for a new booking.
    DRF collects the errors of every field before failing, so the client
    gets the full list in one response.
    """
    artisan = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    service = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    service_date = serializers.DateField()
    service_time = serializers.CharField(
        max_length=5,
        validators=[RegexValidator(TIME_RE, "Time must use the 24h HH:MM format.")],
    )
    amount = AmountField(min_value=0)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    location = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def to_internal_value(self, data):
        data = dict(data.items()) if hasattr(data, "items") else data
        if isinstance(data, dict):
            for field, aliases in FIELD_ALIASES.items():
                if data.get(field) in (None, ""):
                    for alias in aliases:
                        if data.get(alias) not in (None, ""):
                            data[field] = data[alias]
                            break
            # Accept full ISO datetimes from JS clients; keep the date part
            raw_date = data.get("service_date")
            if isinstance(raw_date, str) and "T" in raw_date:
                data["service_date"] = raw_date.split("T", 1)[0].strip()
        return super().to_internal_value(data)


class BookingSerializer(serializers.ModelSerializer):
    client = UserSummarySerializer(read_only=True)
    artisan = UserSummarySerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "reference",
            "client",
            "artisan",
            "service",
            "description",
            "service_date",
            "service_time",
            "amount",
            "payment_method",
            "location",
            "status",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # Legacy keys still read by older clients
        data["_id"] = data["id"]
        data["date"] = data["service_date"]
        data["time"] = data["service_time"]
        data["paymentMethod"] = data["payment_method"]
        data["clientId"] = instance.client_id
        data["clientName"] = display_name(instance.client)
        data["bookerUserId"] = instance.client_id
        data["artisanId"] = instance.artisan_id
        data["artisanName"] = display_name(instance.artisan)
        data["bookedArtisanId"] = instance.artisan_id
        data["createdAt"] = data["created_at"]
        data["updatedAt"] = data["updated_at"]
        return data
