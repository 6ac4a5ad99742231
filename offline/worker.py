"""
OfflineWorker
-------------
Fronts every request the frontend makes to the API.

- GET requests go through the CacheRouter.
- Mutating requests go to the network; when the network is unreachable
  they are stored in the Outbox (202 queued) or refused (422 not-queueable).
- Pages talk to the worker only through messages: they send a Command and
  receive broadcast dicts via subscribe().

Lifecycle:
    parsed -> installing -> waiting -> active -> redundant
                  \\-> redundant (failed install)
install() precaches the app shell; activate() drops every cache partition
whose name is not one of the current versioned names. Until the worker is
active it does not intercept anything.
"""

import logging
from enum import Enum

import requests
from django.db import DatabaseError

from .cache_router import CacheRouter
from .conf import OfflineConfig
from .exceptions import NETWORK_EXCEPTIONS, QueueRejectedError, WorkerStateError
from .http import json_response
from .messages import ANALYTICS_SYNC, OUTBOX_SYNC, PERIODIC_SYNC, Broadcast, Command
from .outbox import QUEUEABLE_METHODS, AnalyticsQueue, Outbox
from .store import OfflineStore

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    WAITING = "waiting"
    ACTIVE = "active"
    REDUNDANT = "redundant"


ALLOWED_TRANSITIONS = {
    WorkerState.PARSED: {WorkerState.INSTALLING, WorkerState.REDUNDANT},
    WorkerState.INSTALLING: {WorkerState.WAITING, WorkerState.REDUNDANT},
    WorkerState.WAITING: {WorkerState.ACTIVE, WorkerState.REDUNDANT},
    WorkerState.ACTIVE: {WorkerState.REDUNDANT},
    WorkerState.REDUNDANT: set(),
}


class OfflineWorker:
    def __init__(self, session=None, store=None, config=None, online=True):
        self.config = config or OfflineConfig.from_settings()
        self.store = store or OfflineStore()
        self.session = session or requests.Session()
        self.state = WorkerState.PARSED
        self.online = online
        self.pending_syncs = []
        self._listeners = []
        self._hooks = {state: [] for state in WorkerState}

        self.router = CacheRouter(self.store, self.session, self.config)
        self.outbox = Outbox(self.store, self.session, self.broadcast)
        self.analytics = AnalyticsQueue(
            self.store, self.session, self.config.analytics_url, self.broadcast
        )

        self._commands = {
            Command.SKIP_WAITING: self._cmd_skip_waiting,
            Command.CLEAR_CACHE: self._cmd_clear_cache,
            Command.GET_VERSION: self._cmd_get_version,
            Command.FORCE_RELOAD: self._cmd_force_reload,
            Command.CLIENT_ONLINE: self._cmd_client_online,
            Command.ANALYTICS_EVENT: self._cmd_analytics_event,
        }
        self._sync_handlers = {
            OUTBOX_SYNC: self.outbox.replay,
            ANALYTICS_SYNC: self.analytics.flush,
            PERIODIC_SYNC: self.flush_all,
        }

    # -------------------- lifecycle --------------------

    def on(self, state, hook):
        """Register hook(previous_state, new_state) run on entering `state`."""
        self._hooks[WorkerState(state)].append(hook)

    def _transition(self, target):
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise WorkerStateError(f"Cannot go from {self.state.value} to {target.value}.")
        previous, self.state = self.state, target
        logger.info("[offline] worker %s -> %s", previous.value, target.value)
        for hook in self._hooks[target]:
            hook(previous, target)

    def install(self) -> int:
        self._transition(WorkerState.INSTALLING)
        try:
            stored = self.router.precache()
        except Exception:
            logger.exception("[offline] install failed")
            self._transition(WorkerState.REDUNDANT)
            raise
        logger.info("[offline] precached %s of %s items", stored, len(self.config.precache_urls))
        self._transition(WorkerState.WAITING)
        if self.config.skip_waiting_on_install:
            self.activate()
        return stored

    def activate(self) -> None:
        self._transition(WorkerState.ACTIVE)
        current = set(self.config.partitions)
        for name in self.store.cache_names():
            if name not in current:
                logger.info("[offline] deleting cache %s", name)
                self.store.cache_delete(name)
        self.broadcast({
            "type": Broadcast.SW_ACTIVATED.value,
            "staticCache": self.config.static_cache,
            "apiCache": self.config.api_cache,
        })

    def retire(self) -> None:
        self._transition(WorkerState.REDUNDANT)

    # -------------------- pages --------------------

    def subscribe(self, listener):
        """Receive broadcast dicts; returns a callable that unsubscribes."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def broadcast(self, message) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("[offline] broadcast to a page failed")

    def handle_message(self, message, reply=None):
        """
        Run one page command.

        Args:
            message: {"type": "<COMMAND>", ...}
            reply: optional callable used to answer (GET_VERSION)
        """
        message = message or {}
        try:
            command = Command(message.get("type"))
        except ValueError:
            logger.debug("[offline] ignoring unknown message %r", message.get("type"))
            return None
        return self._commands[command](message, reply)

    def _cmd_skip_waiting(self, message, reply):
        if self.state is WorkerState.WAITING:
            self.activate()

    def _cmd_clear_cache(self, message, reply):
        for name in self.store.cache_names():
            self.store.cache_delete(name)
        self.outbox.clear()
        self.analytics.clear()
        self.broadcast({"type": Broadcast.CACHES_CLEARED.value})

    def _cmd_get_version(self, message, reply):
        version = {
            "staticCache": self.config.static_cache,
            "apiCache": self.config.api_cache,
            "imageCache": self.config.image_cache,
        }
        if reply is not None:
            reply(version)
        return version

    def _cmd_force_reload(self, message, reply):
        self.broadcast({"type": Broadcast.SW_RELOAD.value})

    def _cmd_client_online(self, message, reply):
        self.online = True
        return self.flush_all()

    def _cmd_analytics_event(self, message, reply):
        self.analytics.record(message.get("event") or {})
        self.schedule_sync(ANALYTICS_SYNC)

    # -------------------- fetch --------------------

    def fetch(self, request):
        """Serve a requests.Request (or PreparedRequest) as the worker would."""
        prepared = request.prepare() if isinstance(request, requests.Request) else request
        if self.state is not WorkerState.ACTIVE:
            return self.session.send(prepared)
        if prepared.method == "GET":
            return self.router.handle(prepared)
        if prepared.method in QUEUEABLE_METHODS:
            return self._send_or_queue(prepared)
        return self.session.send(prepared)

    def _send_or_queue(self, prepared):
        try:
            return self.session.send(prepared)
        except NETWORK_EXCEPTIONS:
            logger.info("[offline] %s %s failed, trying to queue", prepared.method, prepared.url)

        try:
            self.outbox.enqueue(prepared)
        except QueueRejectedError as exc:
            return json_response(422, {"error": "not-queueable", "message": str(exc)}, prepared.url)
        except DatabaseError:
            logger.exception("[offline] failed to queue request")
            return json_response(
                500, {"error": "queue_error", "message": "Failed to queue request"}, prepared.url
            )

        self.schedule_sync(OUTBOX_SYNC)
        return json_response(202, {"ok": True, "queued": True}, prepared.url)

    # -------------------- background sync --------------------

    def schedule_sync(self, tag) -> None:
        """Register a sync tag, or run it now when background sync is off."""
        if self.config.background_sync:
            if tag not in self.pending_syncs:
                self.pending_syncs.append(tag)
        elif self.online:
            self.sync(tag)

    def sync(self, tag):
        handler = self._sync_handlers.get(tag)
        if handler is None:
            logger.debug("[offline] ignoring sync tag %s", tag)
            return None
        return handler()

    def run_pending_syncs(self) -> None:
        """Fire registered tags; a tag stays registered while its queue is not empty."""
        for tag in list(self.pending_syncs):
            self.sync(tag)
            if not self._queue_for(tag):
                self.pending_syncs.remove(tag)

    def _queue_for(self, tag) -> list:
        if tag == OUTBOX_SYNC:
            return self.store.outbox_all()
        if tag == ANALYTICS_SYNC:
            return self.store.analytics_all()
        return []

    def set_online(self, online) -> None:
        self.online = bool(online)
        if self.online:
            self.run_pending_syncs()

    def flush_all(self):
        result = self.outbox.replay()
        self.analytics.flush()
        return result

    # -------------------- notifications --------------------

    def notification_click(self, action=None, data=None):
        """
        Forward a notification click to the open pages.
        Returns the URL to open when no page is listening, else None.
        """
        data = data or {}
        if self._listeners:
            self.broadcast({"type": Broadcast.NOTIFICATION_CLICK.value, "action": action, "data": data})
            return None
        url = f"{self.config.base_path}/"
        if data.get("bookingId"):
            url += f"?notification=booking&id={data['bookingId']}"
        elif data.get("url"):
            return data["url"]
        return self.config.absolute(url)
