# offline/models.py
#
# Purpose:
# - Local durable state of the offline worker:
#   * OutboxEntry: mutating requests captured while the network was down.
#   * AnalyticsEvent: analytics records waiting to be flushed.
#   * CachedResponse: last-known-good responses, grouped in named partitions.
#
# Notes:
# - The auto-increment id of both queues is the FIFO ordering key.
# - Partition names embed a version (naco-api-v1.5.9); rotating the version
#   and activating the worker drops every partition with another name.
# - Cache keys are normalized URLs (origin + path, no query/fragment).
#
from django.db import models


class OutboxEntry(models.Model):
    url = models.URLField(max_length=2048)
    method = models.CharField(max_length=10)
    headers = models.JSONField(default=dict, blank=True)
    body = models.TextField(null=True, blank=True)
    is_json = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "outbox entries"

    def __str__(self):
        return f"#{self.pk} {self.method} {self.url}"


class AnalyticsEvent(models.Model):
    event = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"#{self.pk} analytics event"


class CachedResponse(models.Model):
    partition = models.CharField(max_length=100)
    key = models.CharField(max_length=2048)
    status_code = models.PositiveSmallIntegerField(default=200)
    headers = models.JSONField(default=dict, blank=True)
    body = models.BinaryField(default=b"")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["partition", "key"], name="uniq_cached_response_partition_key"),
        ]

    def __str__(self):
        return f"[{self.partition}] {self.key}"
