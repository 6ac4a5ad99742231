"""
cache_router.py
---------------
Decides, for every outgoing GET, which caching strategy governs it and runs
that strategy against the network and the cache partitions.

Classification (first match wins):
1) live-only URLs (artisan / user detail)      -> network only, never cached
2) image extensions                            -> cache first, image partition,
                                                  placeholder on total failure
3) external CDN origins                        -> cache first, network bounded
                                                  by a timeout (default 5s)
4) precached app-shell assets and navigations  -> cache first; navigations go
                                                  to the network and fall back
                                                  to the cached root document
5) API path prefixes                           -> network first, cache fallback,
                                                  only successful GETs stored
6) anything else                               -> network first, static
                                                  partition fallback

A failed fetch never evicts what is already cached.
"""

import logging
import re
from enum import Enum
from urllib.parse import urlsplit

import requests

from .exceptions import NETWORK_EXCEPTIONS
from .http import is_navigation, json_response, normalize_url, origin_of, text_response

logger = logging.getLogger(__name__)

IMAGE_RE = re.compile(r"\.(png|jpg|jpeg|gif|webp|avif|svg)$", re.IGNORECASE)


class Strategy(str, Enum):
    NETWORK_ONLY = "network-only"
    CACHE_FIRST_IMAGE = "cache-first-image"
    CACHE_FIRST_EXTERNAL = "cache-first-external"
    CACHE_FIRST_APP_SHELL = "cache-first-app-shell"
    NETWORK_FIRST_API = "network-first-api"
    NETWORK_FIRST_DEFAULT = "network-first-default"


class CacheRouter:
    def __init__(self, store, session, config):
        self.store = store
        self.session = session
        self.config = config
        self._precached = frozenset(
            normalize_url(config.absolute(path)) for path in config.precache_urls
        )
        self._handlers = {
            Strategy.NETWORK_ONLY: self.network_only,
            Strategy.CACHE_FIRST_IMAGE: self.cache_first_image,
            Strategy.CACHE_FIRST_EXTERNAL: self.cache_first_external,
            Strategy.CACHE_FIRST_APP_SHELL: self.cache_first_app_shell,
            Strategy.NETWORK_FIRST_API: self.network_first_api,
            Strategy.NETWORK_FIRST_DEFAULT: self.network_first_default,
        }

    # -------------------- classification --------------------

    def classify(self, prepared) -> Strategy:
        path = urlsplit(prepared.url).path
        if self.config.is_live_only_path(path):
            return Strategy.NETWORK_ONLY
        if IMAGE_RE.search(path):
            return Strategy.CACHE_FIRST_IMAGE
        if origin_of(prepared.url) in self.config.external_origins:
            return Strategy.CACHE_FIRST_EXTERNAL
        if normalize_url(prepared.url) in self._precached or is_navigation(prepared):
            return Strategy.CACHE_FIRST_APP_SHELL
        if any(path.startswith(prefix) for prefix in self.config.api_prefixes):
            return Strategy.NETWORK_FIRST_API
        return Strategy.NETWORK_FIRST_DEFAULT

    def handle(self, prepared):
        strategy = self.classify(prepared)
        logger.debug("[offline] %s %s -> %s", prepared.method, prepared.url, strategy.value)
        return self._handlers[strategy](prepared)

    # -------------------- strategies --------------------

    def network_only(self, prepared):
        try:
            return self._fetch(prepared)
        except NETWORK_EXCEPTIONS:
            return json_response(503, {"error": "network", "message": "Network required"}, prepared.url)

    def cache_first_image(self, prepared):
        partition = self.config.image_cache
        cached = self.store.cache_match(partition, prepared.url)
        if cached is not None:
            return cached
        try:
            response = self._fetch(prepared)
        except NETWORK_EXCEPTIONS:
            placeholder = self.store.cache_match_any(self.config.placeholder_image_url)
            if placeholder is not None:
                return placeholder
            return text_response(503, "Image unavailable", prepared.url)
        self._remember(partition, prepared, response)
        return response

    def cache_first_external(self, prepared):
        partition = self.config.static_cache
        cached = self.store.cache_match(partition, prepared.url)
        if cached is not None:
            return cached
        try:
            response = self._fetch(prepared, timeout=self.config.external_timeout)
        except NETWORK_EXCEPTIONS:
            logger.info("[offline] external fetch failed or timed out: %s", prepared.url)
            return text_response(503, "External resource unavailable", prepared.url)
        self._remember(partition, prepared, response)
        return response

    def cache_first_app_shell(self, prepared):
        partition = self.config.static_cache
        if is_navigation(prepared):
            try:
                response = self._fetch(prepared)
            except NETWORK_EXCEPTIONS:
                for url in self.config.root_document_urls:
                    fallback = self.store.cache_match(partition, url)
                    if fallback is not None:
                        return fallback
                return text_response(503, "Offline", prepared.url)
            self._remember(partition, prepared, response)
            return response

        cached = self.store.cache_match(partition, prepared.url)
        if cached is not None:
            return cached
        try:
            response = self._fetch(prepared)
        except NETWORK_EXCEPTIONS:
            return text_response(503, "Resource unavailable", prepared.url)
        self._remember(partition, prepared, response)
        return response

    def network_first_api(self, prepared):
        partition = self.config.api_cache
        try:
            response = self._fetch(prepared)
        except NETWORK_EXCEPTIONS:
            cached = self.store.cache_match(partition, prepared.url)
            if cached is not None:
                return cached
            return json_response(503, {"error": "offline", "message": "API unavailable"}, prepared.url)
        if prepared.method == "GET":
            self._remember(partition, prepared, response)
        return response

    def network_first_default(self, prepared):
        try:
            return self._fetch(prepared)
        except NETWORK_EXCEPTIONS:
            cached = self.store.cache_match(self.config.static_cache, prepared.url)
            if cached is not None:
                return cached
            return text_response(503, "Offline", prepared.url)

    # -------------------- helpers --------------------

    def precache(self, urls=None) -> int:
        """Fetch and store the app-shell list; returns how many were stored."""
        stored = 0
        for path in urls if urls is not None else self.config.precache_urls:
            url = self.config.absolute(path)
            try:
                response = self._fetch(requests.Request("GET", url).prepare())
            except NETWORK_EXCEPTIONS as exc:
                logger.error("[offline] precache failed for %s: %s", url, exc)
                continue
            if response.ok:
                self.store.cache_put(self.config.static_cache, url, response)
                stored += 1
            else:
                logger.error("[offline] precache got %s for %s", response.status_code, url)
        return stored

    def _fetch(self, prepared, timeout=None):
        return self.session.send(prepared, timeout=timeout)

    def _remember(self, partition, prepared, response):
        if response is not None and response.ok:
            self.store.cache_put(partition, prepared.url, response)
