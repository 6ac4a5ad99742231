"""
OfflineStore
------------
The single handle through which the worker touches its local state:
cache partitions, the outbox queue and the analytics queue.

It is created once when the worker starts and passed to every component
(CacheRouter, Outbox, AnalyticsQueue), bound to one database alias.
Every method is one atomic unit against that database.
"""

from django.db import transaction

from .http import build_response, normalize_url
from .models import AnalyticsEvent, CachedResponse, OutboxEntry


class OfflineStore:
    def __init__(self, using="default"):
        self.using = using

    def _atomic(self):
        return transaction.atomic(using=self.using)

    # -------------------- cache partitions --------------------

    def cache_names(self) -> list:
        return sorted(
            CachedResponse.objects.using(self.using)
            .values_list("partition", flat=True)
            .distinct()
        )

    def cache_match(self, partition, url):
        """Stored response for `url` in `partition`, or None."""
        row = (
            CachedResponse.objects.using(self.using)
            .filter(partition=partition, key=normalize_url(url))
            .first()
        )
        return self._to_response(row)

    def cache_match_any(self, url):
        """Like cache_match but searches every partition."""
        row = (
            CachedResponse.objects.using(self.using)
            .filter(key=normalize_url(url))
            .order_by("-updated_at")
            .first()
        )
        return self._to_response(row)

    def cache_put(self, partition, url, response) -> None:
        with self._atomic():
            CachedResponse.objects.using(self.using).update_or_create(
                partition=partition,
                key=normalize_url(url),
                defaults={
                    "status_code": response.status_code,
                    "headers": dict(response.headers),
                    "body": response.content or b"",
                },
            )

    def cache_keys(self, partition) -> list:
        return list(
            CachedResponse.objects.using(self.using)
            .filter(partition=partition)
            .order_by("key")
            .values_list("key", flat=True)
        )

    def cache_delete(self, partition) -> int:
        with self._atomic():
            deleted, _ = CachedResponse.objects.using(self.using).filter(partition=partition).delete()
        return deleted

    def _to_response(self, row):
        if row is None:
            return None
        return build_response(
            row.status_code,
            bytes(row.body),
            headers=row.headers,
            url=row.key,
        )

    # -------------------- outbox queue --------------------

    def outbox_add(self, url, method, headers, body, is_json) -> OutboxEntry:
        with self._atomic():
            return OutboxEntry.objects.using(self.using).create(
                url=url, method=method, headers=headers, body=body, is_json=is_json
            )

    def outbox_all(self) -> list:
        return list(OutboxEntry.objects.using(self.using).order_by("id"))

    def outbox_delete(self, entry_id) -> None:
        with self._atomic():
            OutboxEntry.objects.using(self.using).filter(pk=entry_id).delete()

    def outbox_clear(self) -> None:
        with self._atomic():
            OutboxEntry.objects.using(self.using).all().delete()

    # -------------------- analytics queue --------------------

    def analytics_add(self, event) -> AnalyticsEvent:
        with self._atomic():
            return AnalyticsEvent.objects.using(self.using).create(event=event)

    def analytics_all(self) -> list:
        return list(AnalyticsEvent.objects.using(self.using).order_by("id"))

    def analytics_delete(self, event_id) -> None:
        with self._atomic():
            AnalyticsEvent.objects.using(self.using).filter(pk=event_id).delete()

    def analytics_clear(self) -> None:
        with self._atomic():
            AnalyticsEvent.objects.using(self.using).all().delete()
