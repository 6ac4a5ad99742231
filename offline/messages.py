"""
Message vocabulary between the worker and the pages it serves.

Pages send a Command (as {"type": "<COMMAND>", ...}); the worker broadcasts
dicts whose "type" is a Broadcast value.
"""

from enum import Enum


class Command(str, Enum):
    SKIP_WAITING = "SKIP_WAITING"
    CLEAR_CACHE = "CLEAR_CACHE"
    GET_VERSION = "GET_VERSION"
    FORCE_RELOAD = "FORCE_RELOAD"
    CLIENT_ONLINE = "CLIENT_ONLINE"
    ANALYTICS_EVENT = "ANALYTICS_EVENT"


class Broadcast(str, Enum):
    SW_ACTIVATED = "SW_ACTIVATED"
    SW_RELOAD = "SW_RELOAD"
    OUTBOX_QUEUED = "OUTBOX_QUEUED"
    OUTBOX_SENT = "OUTBOX_SENT"
    OUTBOX_DROPPED = "OUTBOX_DROPPED"
    ANALYTICS_FLUSHED = "ANALYTICS_FLUSHED"
    CACHES_CLEARED = "CACHES_CLEARED"
    NOTIFICATION_CLICK = "NOTIFICATION_CLICK"


# Background sync tags
OUTBOX_SYNC = "outbox-sync"
ANALYTICS_SYNC = "analytics-sync"
PERIODIC_SYNC = "naco-periodic-sync"
