from django.contrib.auth import get_user_model

User = get_user_model()


def make_user(username, first_name="", last_name=""):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass12345",
        first_name=first_name,
        last_name=last_name,
    )


def booking_payload(artisan, **overrides):
    data = {
        "artisan": artisan.pk,
        "service": "Fix sink",
        "description": "Kitchen sink is leaking",
        "service_date": "2025-08-15",
        "service_time": "10:00",
        "amount": 3500,
        "payment_method": "cash",
        "location": "Yaba, Lagos",
    }
    data.update(overrides)
    return data


class FailingDispatcher:
    """Notifier whose every dispatch blows up."""

    def dispatch(self, **kwargs):
        raise RuntimeError("notification store unavailable")
