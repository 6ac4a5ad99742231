"""
Configuration of the offline worker, read once from settings.NACO_OFFLINE.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urljoin

from django.conf import settings


@dataclass(frozen=True)
class OfflineConfig:
    static_version: str = "v1"
    api_version: str = "v1"
    origin: str = "http://localhost:8091"
    base_path: str = ""
    precache_urls: tuple = ()
    external_origins: tuple = ()
    external_timeout: float = 5.0
    api_prefixes: tuple = ()
    live_only_patterns: tuple = ()
    analytics_endpoint: str = "/analytics/offline"
    background_sync: bool = True
    skip_waiting_on_install: bool = True
    _live_only: tuple = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_live_only", tuple(re.compile(p) for p in self.live_only_patterns))

    @classmethod
    def from_settings(cls, **overrides):
        raw = dict(getattr(settings, "NACO_OFFLINE", {}))
        values = {
            "static_version": raw.get("STATIC_VERSION", cls.static_version),
            "api_version": raw.get("API_VERSION", cls.api_version),
            "origin": raw.get("ORIGIN", cls.origin),
            "base_path": raw.get("BASE_PATH", cls.base_path),
            "precache_urls": tuple(raw.get("PRECACHE_URLS", ())),
            "external_origins": tuple(raw.get("EXTERNAL_ORIGINS", ())),
            "external_timeout": float(raw.get("EXTERNAL_TIMEOUT", cls.external_timeout)),
            "api_prefixes": tuple(raw.get("API_PREFIXES", ())),
            "live_only_patterns": tuple(raw.get("LIVE_ONLY_PATTERNS", ())),
            "analytics_endpoint": raw.get("ANALYTICS_ENDPOINT", cls.analytics_endpoint),
            "background_sync": bool(raw.get("BACKGROUND_SYNC", cls.background_sync)),
            "skip_waiting_on_install": bool(raw.get("SKIP_WAITING_ON_INSTALL", cls.skip_waiting_on_install)),
        }
        values.update(overrides)
        return cls(**values)

    # ---- partition names ----

    @property
    def static_cache(self) -> str:
        return f"naco-static-{self.static_version}"

    @property
    def api_cache(self) -> str:
        return f"naco-api-{self.api_version}"

    @property
    def image_cache(self) -> str:
        return f"naco-images-{self.static_version}"

    @property
    def partitions(self) -> tuple:
        return (self.static_cache, self.api_cache, self.image_cache)

    # ---- url helpers ----

    def absolute(self, path) -> str:
        return urljoin(self.origin, path)

    @property
    def placeholder_image_url(self) -> str:
        return self.absolute(f"{self.base_path}/assets/avatar-placeholder.png")

    @property
    def root_document_urls(self) -> tuple:
        return (
            self.absolute(f"{self.base_path}/index.html"),
            self.absolute("/index.html"),
            self.absolute("/"),
        )

    @property
    def analytics_url(self) -> str:
        return self.absolute(self.analytics_endpoint)

    def is_live_only_path(self, path) -> bool:
        return any(p.search(path) for p in self._live_only)
