"""
outbox.py
---------
Durable queues of the offline worker.

Outbox
- A mutating request (POST/PUT/PATCH/DELETE) that failed for lack of network
  is serialized and stored, then replayed later in FIFO order.
- Only JSON bodies (or a bodyless DELETE) are stored; anything else is
  rejected right away with QueueRejectedError.
- Replay outcome per entry:
    2xx              -> removed, OUTBOX_SENT
    4xx              -> removed, OUTBOX_DROPPED (the server will never accept it)
    5xx              -> kept for the next run, the run continues
    network failure  -> kept, the run stops here (order preserved)
- Replaying is only as idempotent as the endpoint behind it.

AnalyticsQueue
- Offline analytics events, flushed to the analytics endpoint in order;
  stops at the first failure and retries on the next trigger.
"""

import json
import logging
from dataclasses import dataclass, field

import requests

from .exceptions import NETWORK_EXCEPTIONS, QueueRejectedError
from .messages import Broadcast

logger = logging.getLogger(__name__)

QUEUEABLE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

# Recomputed when the request is rebuilt
VOLATILE_HEADERS = ("content-length",)


def _noop(message):
    return None


@dataclass
class ReplayResult:
    sent: list = field(default_factory=list)
    dropped: list = field(default_factory=list)
    retained: list = field(default_factory=list)
    interrupted: bool = False


class Outbox:
    def __init__(self, store, session, broadcast=None):
        self.store = store
        self.session = session
        self.broadcast = broadcast or _noop

    def serialize(self, prepared) -> dict:
        headers = {
            k: v for k, v in prepared.headers.items() if k.lower() not in VOLATILE_HEADERS
        }
        body = prepared.body
        if isinstance(body, bytes):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError:
                body = None
        if body == "":
            body = None
        content_type = prepared.headers.get("Content-Type") or ""
        return {
            "url": prepared.url,
            "method": prepared.method.upper(),
            "headers": headers,
            "body": body,
            "is_json": "application/json" in content_type and _parses_as_json(body),
        }

    def enqueue(self, prepared):
        """
        Store a failed mutating request for later replay.

        Raises:
            QueueRejectedError: body is not JSON and the method is not DELETE
        """
        serialized = self.serialize(prepared)
        if serialized["method"] not in QUEUEABLE_METHODS:
            raise QueueRejectedError(f"{serialized['method']} requests are not queued.")
        if not serialized["is_json"] and serialized["method"] != "DELETE":
            raise QueueRejectedError()

        entry = self.store.outbox_add(**serialized)
        logger.info("[offline] queued #%s %s %s", entry.pk, entry.method, entry.url)
        self.broadcast({
            "type": Broadcast.OUTBOX_QUEUED.value,
            "item": {"id": entry.pk, "url": entry.url, "method": entry.method},
        })
        return entry

    def pending(self) -> list:
        return self.store.outbox_all()

    def build_request(self, entry):
        body = entry.body if entry.is_json else None
        return requests.Request(
            method=entry.method,
            url=entry.url,
            headers=entry.headers,
            data=body,
        ).prepare()

    def replay(self) -> ReplayResult:
        result = ReplayResult()
        entries = self.store.outbox_all()
        for index, entry in enumerate(entries):
            try:
                response = self.session.send(self.build_request(entry))
            except NETWORK_EXCEPTIONS as exc:
                logger.warning("[offline] outbox #%s failed (network): %s", entry.pk, exc)
                result.retained.extend(e.pk for e in entries[index:])
                result.interrupted = True
                return result

            if response.ok:
                self.store.outbox_delete(entry.pk)
                result.sent.append(entry.pk)
                self.broadcast({"type": Broadcast.OUTBOX_SENT.value, "id": entry.pk, "url": entry.url})
            elif 400 <= response.status_code < 500:
                logger.warning(
                    "[offline] outbox #%s dropped: %s answered %s",
                    entry.pk, entry.url, response.status_code,
                )
                self.store.outbox_delete(entry.pk)
                result.dropped.append(entry.pk)
                self.broadcast({
                    "type": Broadcast.OUTBOX_DROPPED.value,
                    "id": entry.pk,
                    "url": entry.url,
                    "status": response.status_code,
                })
            else:
                logger.warning(
                    "[offline] outbox #%s failed (server %s), kept", entry.pk, response.status_code
                )
                result.retained.append(entry.pk)
        return result

    def clear(self) -> None:
        self.store.outbox_clear()


class AnalyticsQueue:
    def __init__(self, store, session, endpoint, broadcast=None):
        self.store = store
        self.session = session
        self.endpoint = endpoint
        self.broadcast = broadcast or _noop

    def record(self, event):
        return self.store.analytics_add(event)

    def flush(self) -> int:
        """POST queued events in order; returns how many were delivered."""
        events = self.store.analytics_all()
        if not events:
            return 0
        delivered = 0
        for item in events:
            request = requests.Request("POST", self.endpoint, json=item.event).prepare()
            try:
                response = self.session.send(request)
            except NETWORK_EXCEPTIONS as exc:
                logger.warning("[offline] analytics flush failed (network): %s", exc)
                return delivered
            if not response.ok:
                logger.warning("[offline] analytics POST failed: %s", response.status_code)
                return delivered
            self.store.analytics_delete(item.pk)
            delivered += 1
        self.broadcast({"type": Broadcast.ANALYTICS_FLUSHED.value, "count": delivered})
        return delivered

    def clear(self) -> None:
        self.store.analytics_clear()


def _parses_as_json(body) -> bool:
    if body is None:
        return False
    try:
        json.loads(body)
    except ValueError:
        return False
    return True
