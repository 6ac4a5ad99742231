import json

import requests
from django.test import TestCase

from offline.exceptions import QueueRejectedError
from offline.messages import Broadcast
from offline.outbox import AnalyticsQueue, Outbox
from offline.store import OfflineStore

from .fakes import ORIGIN, FakeSession, post_json

A = f"{ORIGIN}/bookings"
B = f"{ORIGIN}/bookings/7/accept"
C = f"{ORIGIN}/notifications/3/read"


class OutboxTests(TestCase):
    def setUp(self):
        self.store = OfflineStore()
        self.session = FakeSession()
        self.messages = []
        self.outbox = Outbox(self.store, self.session, self.messages.append)

    def _queue_three(self):
        return [
            self.outbox.enqueue(post_json(A, {"service": "Fix sink"}, Authorization="Bearer t0k")),
            self.outbox.enqueue(post_json(B, {}, method="PUT")),
            self.outbox.enqueue(post_json(C, {}, method="PUT")),
        ]

    def test_enqueue_json_request(self):
        entry = self.outbox.enqueue(post_json(A, {"service": "Fix sink"}, Authorization="Bearer t0k"))

        self.assertTrue(entry.is_json)
        self.assertEqual(entry.method, "POST")
        self.assertEqual(json.loads(entry.body), {"service": "Fix sink"})
        self.assertEqual(entry.headers["Authorization"], "Bearer t0k")
        self.assertNotIn("Content-Length", entry.headers)
        self.assertEqual(
            self.messages,
            [{"type": Broadcast.OUTBOX_QUEUED.value, "item": {"id": entry.pk, "url": A, "method": "POST"}}],
        )

    def test_form_body_is_rejected(self):
        prepared = requests.Request("POST", A, data={"service": "x"}).prepare()

        with self.assertRaises(QueueRejectedError):
            self.outbox.enqueue(prepared)
        self.assertEqual(self.outbox.pending(), [])

    def test_unparseable_json_is_rejected(self):
        prepared = requests.Request(
            "PUT", B, data="not json", headers={"Content-Type": "application/json"}
        ).prepare()

        with self.assertRaises(QueueRejectedError):
            self.outbox.enqueue(prepared)

    def test_bodyless_delete_is_queued(self):
        entry = self.outbox.enqueue(requests.Request("DELETE", f"{ORIGIN}/favorites/9").prepare())

        self.assertFalse(entry.is_json)
        self.assertIsNone(entry.body)

    def test_replay_sends_and_removes(self):
        self._queue_three()
        self.session.default = (200, {"ok": True}, None)

        result = self.outbox.replay()

        self.assertEqual(len(result.sent), 3)
        self.assertFalse(result.interrupted)
        self.assertEqual(self.outbox.pending(), [])
        self.assertEqual(self.session.sent_urls, [A, B, C])
        sent_types = [m["type"] for m in self.messages if m["type"] == Broadcast.OUTBOX_SENT.value]
        self.assertEqual(len(sent_types), 3)

    def test_replayed_request_keeps_body_and_headers(self):
        self.outbox.enqueue(post_json(A, {"service": "Fix sink"}, Authorization="Bearer t0k"))
        self.session.reply("POST", A, 201, {"id": 1})

        self.outbox.replay()

        request, _ = self.session.sent[-1]
        self.assertEqual(json.loads(request.body), {"service": "Fix sink"})
        self.assertEqual(request.headers["Authorization"], "Bearer t0k")
        self.assertEqual(request.headers["Content-Type"], "application/json")

    def test_network_failure_stops_replay_in_order(self):
        a, b, c = self._queue_three()
        self.session.fail("POST", A)
        self.session.default = (200, {"ok": True}, None)

        result = self.outbox.replay()

        self.assertTrue(result.interrupted)
        self.assertEqual(result.sent, [])
        self.assertEqual(result.retained, [a.pk, b.pk, c.pk])
        self.assertEqual(self.session.sent_urls, [A])

        # Next run starts again from A
        self.session.reply("POST", A, 201, {"id": 1})
        result = self.outbox.replay()

        self.assertEqual(result.sent, [a.pk, b.pk, c.pk])
        self.assertEqual(self.session.sent_urls, [A, A, B, C])

    def test_client_error_is_dropped_not_retried(self):
        entry = self.outbox.enqueue(post_json(B, {}, method="PUT"))
        self.session.reply("PUT", B, 409, {"detail": "Cannot accept a booking that is completed."})

        result = self.outbox.replay()

        self.assertEqual(result.dropped, [entry.pk])
        self.assertEqual(self.outbox.pending(), [])
        self.assertIn(
            {"type": Broadcast.OUTBOX_DROPPED.value, "id": entry.pk, "url": B, "status": 409},
            self.messages,
        )
        sent_before = len(self.session.sent)
        self.outbox.replay()
        self.assertEqual(len(self.session.sent), sent_before)

    def test_server_error_is_kept_and_run_continues(self):
        a, b, c = self._queue_three()
        self.session.reply("POST", A, 503, {"error": "busy"})
        self.session.default = (200, {"ok": True}, None)

        result = self.outbox.replay()

        self.assertEqual(result.retained, [a.pk])
        self.assertEqual(result.sent, [b.pk, c.pk])
        self.assertFalse(result.interrupted)
        self.assertEqual([e.pk for e in self.outbox.pending()], [a.pk])

    def test_clear(self):
        self._queue_three()
        self.outbox.clear()
        self.assertEqual(self.outbox.pending(), [])


class AnalyticsQueueTests(TestCase):
    endpoint = f"{ORIGIN}/analytics/offline"

    def setUp(self):
        self.store = OfflineStore()
        self.session = FakeSession()
        self.messages = []
        self.queue = AnalyticsQueue(self.store, self.session, self.endpoint, self.messages.append)

    def test_flush_delivers_in_order(self):
        self.queue.record({"event": "page_view", "page": "/bookings"})
        self.queue.record({"event": "search", "q": "plumber"})
        self.session.reply("POST", self.endpoint, 204)

        delivered = self.queue.flush()

        self.assertEqual(delivered, 2)
        self.assertEqual(self.store.analytics_all(), [])
        bodies = [json.loads(r.body)["event"] for r, _ in self.session.sent]
        self.assertEqual(bodies, ["page_view", "search"])
        self.assertEqual(self.messages, [{"type": Broadcast.ANALYTICS_FLUSHED.value, "count": 2}])

    def test_flush_stops_at_first_failure(self):
        self.queue.record({"event": "a"})
        self.queue.record({"event": "b"})
        self.session.fail("POST", self.endpoint)

        self.assertEqual(self.queue.flush(), 0)
        self.assertEqual(len(self.store.analytics_all()), 2)
        self.assertEqual(len(self.session.sent), 1)
        self.assertEqual(self.messages, [])

    def test_flush_empty_queue_sends_nothing(self):
        self.assertEqual(self.queue.flush(), 0)
        self.assertEqual(self.session.sent, [])
