import requests
from django.test import TestCase

from offline.cache_router import CacheRouter, Strategy
from offline.conf import OfflineConfig
from offline.http import build_response
from offline.store import OfflineStore

from .fakes import ORIGIN, FakeSession, get


class ClassificationTests(TestCase):
    def setUp(self):
        self.router = CacheRouter(OfflineStore(), FakeSession(), OfflineConfig.from_settings())

    def assertStrategy(self, prepared, expected):
        self.assertEqual(self.router.classify(prepared), expected, prepared.url)

    def test_live_only_paths(self):
        self.assertStrategy(get(f"{ORIGIN}/artisans/abc123"), Strategy.NETWORK_ONLY)
        self.assertStrategy(get(f"{ORIGIN}/users/42/"), Strategy.NETWORK_ONLY)
        self.assertStrategy(
            get(f"{ORIGIN}/api/collections/users/records/xyz"), Strategy.NETWORK_ONLY
        )

    def test_artisan_listing_is_api_not_live_only(self):
        self.assertStrategy(get(f"{ORIGIN}/artisans"), Strategy.NETWORK_FIRST_API)

    def test_images_by_extension(self):
        self.assertStrategy(get(f"{ORIGIN}/uploads/avatar.PNG"), Strategy.CACHE_FIRST_IMAGE)
        self.assertStrategy(get("https://cdn.jsdelivr.net/logo.svg"), Strategy.CACHE_FIRST_IMAGE)

    def test_external_origins(self):
        self.assertStrategy(
            get("https://fonts.googleapis.com/css2?family=Inter"), Strategy.CACHE_FIRST_EXTERNAL
        )

    def test_app_shell_and_navigation(self):
        self.assertStrategy(
            get(f"{ORIGIN}/frontend/public/css/style.css"), Strategy.CACHE_FIRST_APP_SHELL
        )
        self.assertStrategy(
            get(f"{ORIGIN}/frontend/public/bookings.html", Accept="text/html"),
            Strategy.CACHE_FIRST_APP_SHELL,
        )

    def test_api_and_default(self):
        self.assertStrategy(get(f"{ORIGIN}/bookings"), Strategy.NETWORK_FIRST_API)
        self.assertStrategy(get(f"{ORIGIN}/notifications?unread=1"), Strategy.NETWORK_FIRST_API)
        self.assertStrategy(get(f"{ORIGIN}/health"), Strategy.NETWORK_FIRST_DEFAULT)


class StrategyTests(TestCase):
    def setUp(self):
        self.config = OfflineConfig.from_settings()
        self.store = OfflineStore()
        self.session = FakeSession()
        self.router = CacheRouter(self.store, self.session, self.config)

    def test_artisan_detail_is_never_cached(self):
        url = f"{ORIGIN}/artisans/abc123"
        self.session.reply("GET", url, 200, {"id": "abc123", "name": "Amaka"})

        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.store.cache_names(), [])

    def test_network_only_offline_is_503(self):
        self.session.offline = True
        response = self.router.handle(get(f"{ORIGIN}/artisans/abc123"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"error": "network", "message": "Network required"})

    def test_image_is_served_from_cache_when_offline(self):
        url = f"{ORIGIN}/uploads/work-1.png"
        self.session.reply("GET", url, 200, b"\x89PNG-bytes", {"Content-Type": "image/png"})
        self.router.handle(get(url))

        self.session.offline = True
        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"\x89PNG-bytes")
        self.assertEqual(response.headers["Content-Type"], "image/png")
        self.assertIn(url, self.store.cache_keys(self.config.image_cache))

    def test_cached_image_skips_network(self):
        url = f"{ORIGIN}/uploads/work-2.jpg"
        self.store.cache_put(self.config.image_cache, url, build_response(200, b"jpg"))

        response = self.router.handle(get(url))

        self.assertEqual(response.content, b"jpg")
        self.assertEqual(self.session.sent, [])

    def test_image_falls_back_to_placeholder(self):
        self.store.cache_put(
            self.config.static_cache,
            self.config.placeholder_image_url,
            build_response(200, b"placeholder"),
        )
        self.session.offline = True

        response = self.router.handle(get(f"{ORIGIN}/uploads/never-seen.webp"))

        self.assertEqual(response.content, b"placeholder")

    def test_image_without_cache_or_placeholder_is_503(self):
        self.session.offline = True
        response = self.router.handle(get(f"{ORIGIN}/uploads/never-seen.webp"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.text, "Image unavailable")

    def test_external_fetch_is_bounded_by_timeout(self):
        url = "https://fonts.googleapis.com/css2"
        self.session.fail("GET", url, requests.Timeout("slow CDN"))

        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.text, "External resource unavailable")
        _, kwargs = self.session.sent[-1]
        self.assertEqual(kwargs["timeout"], self.config.external_timeout)

    def test_external_cached_copy_is_served_offline(self):
        url = "https://fonts.gstatic.com/inter.woff2"
        self.session.reply("GET", url, 200, b"font")
        self.router.handle(get(url))

        self.session.offline = True
        response = self.router.handle(get(url))

        self.assertEqual(response.content, b"font")
        self.assertEqual(len(self.session.sent), 1)

    def test_external_success_is_cached_in_static_partition(self):
        url = "https://unpkg.com/lib.js"
        self.session.reply("GET", url, 200, b"lib()")

        self.router.handle(get(url))

        self.assertIn(url, self.store.cache_keys(self.config.static_cache))

    def test_api_get_is_cached_and_replayed_offline(self):
        url = f"{ORIGIN}/bookings"
        self.session.reply("GET", url, 200, [{"id": 1}])
        self.router.handle(get(url))

        self.session.offline = True
        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [{"id": 1}])

    def test_api_error_responses_are_not_cached(self):
        url = f"{ORIGIN}/bookings"
        self.session.reply("GET", url, 500, {"error": "boom"})

        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 500)
        self.assertIsNone(self.store.cache_match(self.config.api_cache, url))

    def test_api_offline_without_cache_is_503_json(self):
        self.session.offline = True
        response = self.router.handle(get(f"{ORIGIN}/notifications"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"error": "offline", "message": "API unavailable"})

    def test_failed_fetch_does_not_evict(self):
        url = f"{ORIGIN}/bookings"
        self.session.reply("GET", url, 200, [{"id": 1}])
        self.router.handle(get(url))

        self.session.offline = True
        self.router.handle(get(url))
        self.router.handle(get(url))

        self.assertIsNotNone(self.store.cache_match(self.config.api_cache, url))

    def test_navigation_offline_falls_back_to_root_document(self):
        self.store.cache_put(
            self.config.static_cache,
            self.config.absolute("/frontend/public/index.html"),
            build_response(200, b"<html>shell</html>"),
        )
        self.session.offline = True

        response = self.router.handle(
            get(f"{ORIGIN}/frontend/public/profile.html", Accept="text/html")
        )

        self.assertEqual(response.content, b"<html>shell</html>")

    def test_navigation_offline_without_shell_is_503(self):
        self.session.offline = True
        response = self.router.handle(get(f"{ORIGIN}/frontend/public/x.html", Accept="text/html"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.text, "Offline")

    def test_precached_asset_is_served_from_cache(self):
        url = self.config.absolute("/frontend/public/js/app.js")
        self.store.cache_put(self.config.static_cache, url, build_response(200, b"app()"))

        response = self.router.handle(get(url))

        self.assertEqual(response.content, b"app()")
        self.assertEqual(self.session.sent, [])

    def test_default_strategy_does_not_store(self):
        url = f"{ORIGIN}/health"
        self.session.reply("GET", url, 200, b"ok")

        self.router.handle(get(url))
        self.session.offline = True
        response = self.router.handle(get(url))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.store.cache_names(), [])

    def test_precache_stores_every_reachable_url(self):
        self.session.default = (200, b"asset", None)

        stored = self.router.precache()

        self.assertEqual(stored, len(self.config.precache_urls))
        self.assertEqual(len(self.store.cache_keys(self.config.static_cache)), stored)

    def test_precache_skips_failures(self):
        self.session.reply("GET", self.config.absolute("/frontend/public/css/style.css"), 200, b"css")
        self.session.fail("GET", self.config.absolute("/frontend/public/js/app.js"))

        stored = self.router.precache(["/frontend/public/css/style.css", "/frontend/public/js/app.js", "/missing.js"])

        self.assertEqual(stored, 1)
