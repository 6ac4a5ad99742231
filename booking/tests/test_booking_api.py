from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient, APITestCase

from booking.models import Booking, BookingStatus
from notifications.models import Notification

from .helpers import booking_payload, make_user


class BookingApiTests(APITestCase):
    """HTTP surface: status codes, bodies and the legacy keys older clients read."""

    def setUp(self):
        self.api = APIClient()
        self.client_user = make_user("chidi", "Chidi", "Okafor")
        self.artisan = make_user("amaka", "Amaka", "Eze")
        self.api.force_authenticate(user=self.client_user)

    def _create(self, **overrides):
        response = self.api.post("/bookings", booking_payload(self.artisan, **overrides), format="json")
        self.assertEqual(response.status_code, 201, response.content)
        return response.json()

    def _as(self, user):
        self.api.force_authenticate(user=user)

    def test_create_returns_booking_with_legacy_keys(self):
        body = self._create()

        self.assertEqual(body["status"], "pending")
        self.assertRegex(body["reference"], r"^NACO-[A-Z0-9]{9}$")
        self.assertEqual(body["_id"], body["id"])
        self.assertEqual(body["date"], "2025-08-15")
        self.assertEqual(body["time"], "10:00")
        self.assertEqual(body["paymentMethod"], "cash")
        self.assertEqual(body["clientName"], "Chidi Okafor")
        self.assertEqual(body["artisanName"], "Amaka Eze")
        self.assertEqual(body["bookedArtisanId"], self.artisan.pk)
        self.assertEqual(body["bookerUserId"], self.client_user.pk)
        self.assertEqual(body["version"], 1)

    def test_create_invalid_lists_fields(self):
        response = self.api.post("/bookings", {"service": ""}, format="json")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "Validation failed")
        for name in ("artisan", "service", "service_date", "service_time", "amount", "payment_method"):
            self.assertIn(name, body["fields"])

    def test_self_booking_is_403(self):
        self._as(self.artisan)
        response = self.api.post("/bookings", booking_payload(self.artisan), format="json")
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Booking.objects.exists())

    def test_list_only_shows_own_bookings(self):
        mine = self._create()
        outsider = make_user("tunde")
        other_artisan = make_user("bisi")
        self._as(outsider)
        self.api.post("/bookings", booking_payload(other_artisan), format="json")

        self._as(self.artisan)
        response = self.api.get("/bookings")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([b["id"] for b in response.json()], [mine["id"]])

    def test_artisan_accepts(self):
        booking = self._create()
        self._as(self.artisan)

        response = self.api.put(f"/bookings/{booking['id']}/accept", {}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "confirmed")
        self.assertEqual(response.json()["version"], 2)
        self.assertTrue(
            Notification.objects.filter(user=self.client_user, title="Booking Confirmed").exists()
        )

    def test_client_cannot_accept(self):
        booking = self._create()
        response = self.api.put(f"/bookings/{booking['id']}/accept", {}, format="json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(Booking.objects.get().status, BookingStatus.PENDING)

    def test_unknown_booking_is_404(self):
        response = self.api.put("/bookings/424242/accept", {}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_unknown_action_is_400(self):
        booking = self._create()
        self._as(self.artisan)
        response = self.api.put(f"/bookings/{booking['id']}/teleport", {}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_invalid_transition_is_409(self):
        booking = self._create()
        self._as(self.artisan)
        self.api.put(f"/bookings/{booking['id']}/decline", {}, format="json")

        response = self.api.put(f"/bookings/{booking['id']}/accept", {}, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Booking.objects.get().status, BookingStatus.DECLINED)

    def test_if_match_mismatch_is_409(self):
        booking = self._create()
        self._as(self.artisan)

        response = self.api.put(
            f"/bookings/{booking['id']}/accept", {}, format="json", HTTP_IF_MATCH="7"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Booking.objects.get().status, BookingStatus.PENDING)

    def test_version_in_body_is_honoured(self):
        booking = self._create()
        self._as(self.artisan)

        response = self.api.put(
            f"/bookings/{booking['id']}/accept", {"version": 1}, format="json"
        )

        self.assertEqual(response.status_code, 200)

    def test_bad_version_is_400(self):
        booking = self._create()
        self._as(self.artisan)
        response = self.api.put(
            f"/bookings/{booking['id']}/accept", {"version": "abc"}, format="json"
        )
        self.assertEqual(response.status_code, 400)


class BookingAuthTests(APITestCase):
    def setUp(self):
        self.api = APIClient()
        self.user = make_user("chidi")
        self.token = Token.objects.create(user=self.user)

    def test_anonymous_is_401(self):
        response = self.api.get("/bookings")
        self.assertEqual(response.status_code, 401)

    def test_bearer_token_is_accepted(self):
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {self.token.key}")
        response = self.api.get("/bookings")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])
