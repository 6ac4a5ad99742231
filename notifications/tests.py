from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient, APITestCase

from .models import Notification, NotificationType
from .services import NotificationDispatcher, NotificationNotFound


def make_user(username):
    return User.objects.create_user(username=username, email=f"{username}@example.com", password="pass123")


class NotificationDispatcherTests(TestCase):

    def setUp(self):
        self.dispatcher = NotificationDispatcher()
        self.user = make_user("amaka")
        self.other = make_user("chidi")

    def test_dispatch_stores_unread_notification(self):
        note = self.dispatcher.dispatch(
            recipient=self.user,
            title="New Booking Request",
            message="Chidi has requested your Fix sink service",
            actor=self.other,
            action_required=True,
        )

        self.assertEqual(note.user, self.user)
        self.assertEqual(note.type, NotificationType.BOOKING)
        self.assertFalse(note.read)
        self.assertIsNone(note.read_at)
        self.assertTrue(note.action_required)
        self.assertEqual(note.actor, self.other)

    def test_for_user_is_newest_first_and_scoped(self):
        first = self.dispatcher.dispatch(self.user, "one", "m")
        second = self.dispatcher.dispatch(self.user, "two", "m")
        self.dispatcher.dispatch(self.other, "elsewhere", "m")

        ids = [n.pk for n in self.dispatcher.for_user(self.user)]

        self.assertEqual(ids, [second.pk, first.pk])

    def test_for_user_respects_limit(self):
        for i in range(5):
            self.dispatcher.dispatch(self.user, f"n{i}", "m")
        self.assertEqual(len(self.dispatcher.for_user(self.user, limit=3)), 3)

    def test_mark_read_is_idempotent(self):
        note = self.dispatcher.dispatch(self.user, "t", "m")

        first = self.dispatcher.mark_read(self.user, note.pk)
        stamp = first.read_at
        second = self.dispatcher.mark_read(self.user, note.pk)

        self.assertTrue(second.read)
        self.assertIsNotNone(stamp)
        self.assertEqual(Notification.objects.get(pk=note.pk).read_at, stamp)

    def test_mark_read_of_someone_else_is_not_found(self):
        note = self.dispatcher.dispatch(self.other, "t", "m")
        with self.assertRaises(NotificationNotFound):
            self.dispatcher.mark_read(self.user, note.pk)
        self.assertFalse(Notification.objects.get(pk=note.pk).read)

    def test_mark_all_read_only_touches_callers_unread(self):
        self.dispatcher.dispatch(self.user, "a", "m")
        self.dispatcher.dispatch(self.user, "b", "m")
        foreign = self.dispatcher.dispatch(self.other, "c", "m")

        self.assertEqual(self.dispatcher.mark_all_read(self.user), 2)
        self.assertEqual(self.dispatcher.mark_all_read(self.user), 0)
        self.assertFalse(Notification.objects.get(pk=foreign.pk).read)

    def test_content_is_immutable_after_creation(self):
        note = self.dispatcher.dispatch(self.user, "Original", "body")

        note.title = "Changed"
        note.message = "changed body"
        note.read = True
        note.save()

        stored = Notification.objects.get(pk=note.pk)
        self.assertEqual(stored.title, "Original")
        self.assertEqual(stored.message, "body")
        self.assertTrue(stored.read)


class NotificationApiTests(APITestCase):

    def setUp(self):
        self.api = APIClient()
        self.user = make_user("amaka")
        self.other = make_user("chidi")
        self.dispatcher = NotificationDispatcher()
        self.api.force_authenticate(user=self.user)

    def test_list_returns_payload_and_legacy_keys(self):
        self.dispatcher.dispatch(self.user, "Job Completed", "Please review", actor=self.other, action_required=True)

        response = self.api.get("/notifications")

        self.assertEqual(response.status_code, 200)
        item = response.json()[0]
        self.assertEqual(item["_id"], item["id"])
        self.assertEqual(item["title"], "Job Completed")
        self.assertFalse(item["read"])
        self.assertEqual(item["data"], {"bookingId": None, "userId": self.other.pk, "actionRequired": True})
        self.assertEqual(item["createdAt"], item["created_at"])

    def test_create_for_another_user(self):
        response = self.api.post(
            "/notifications",
            {"user": self.other.pk, "title": "Payment received", "message": "N3500", "type": "payment"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        note = Notification.objects.get()
        self.assertEqual(note.user, self.other)
        self.assertEqual(note.type, NotificationType.PAYMENT)

    def test_create_rejects_unknown_type(self):
        response = self.api.post(
            "/notifications",
            {"user": self.other.pk, "title": "x", "message": "y", "type": "sms"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_mark_one_read(self):
        note = self.dispatcher.dispatch(self.user, "t", "m")

        response = self.api.put(f"/notifications/{note.pk}/read", {}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["read"])
        self.assertIsNotNone(response.json()["readAt"])

    def test_mark_foreign_read_is_404(self):
        note = self.dispatcher.dispatch(self.other, "t", "m")
        response = self.api.put(f"/notifications/{note.pk}/read", {}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_mark_all_read(self):
        self.dispatcher.dispatch(self.user, "a", "m")
        self.dispatcher.dispatch(self.user, "b", "m")

        response = self.api.put("/notifications/read", {}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "All notifications marked as read", "updated": 2})
        self.assertFalse(Notification.objects.filter(user=self.user, read=False).exists())

    def test_requires_authentication(self):
        self.api.force_authenticate(user=None)
        self.assertEqual(self.api.get("/notifications").status_code, 401)
