"""
offline_sync.py
---------------
Django management command to drive the offline worker from a terminal.

Usage:
    python manage.py offline_sync                 # replay outbox + flush analytics
    python manage.py offline_sync --install       # precache + activate first
    python manage.py offline_sync --origin https://naco.onrender.com

Behavior:
- Optionally installs/activates the worker (precache, drop stale partitions).
- Replays queued requests in FIFO order and flushes offline analytics.
- Prints how many entries were sent, dropped and kept.
"""

from django.core.management.base import BaseCommand

from offline.conf import OfflineConfig
from offline.worker import OfflineWorker


class Command(BaseCommand):
    help = "Replay the offline outbox and flush queued analytics events."

    def add_arguments(self, parser):
        parser.add_argument(
            "--install",
            action="store_true",
            help="Precache the app shell and activate the current cache version first.",
        )
        parser.add_argument(
            "--origin",
            default=None,
            help="Override NACO_OFFLINE['ORIGIN'] (API / frontend origin).",
        )

    def handle(self, *args, **options):
        overrides = {"origin": options["origin"]} if options["origin"] else {}
        worker = OfflineWorker(config=OfflineConfig.from_settings(**overrides))

        if options["install"]:
            stored = worker.install()
            if worker.state.value != "active":
                worker.activate()
            self.stdout.write(f"Precached {stored} item(s) into {worker.config.static_cache}.")

        result = worker.flush_all()
        self.stdout.write(self.style.SUCCESS(
            f"Outbox: {len(result.sent)} sent, {len(result.dropped)} dropped, "
            f"{len(result.retained)} kept."
        ))
        if result.interrupted:
            self.stdout.write(self.style.WARNING("Network unavailable; replay stopped early."))
