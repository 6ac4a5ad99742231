# naco_marketplace/settings.py
#
# Purpose:
# - Project settings for the marketplace API (bookings + notifications) and
#   the offline request layer that fronts it.
#
# Notes:
# - Values come from the environment (.env is loaded for local dev).
# - DATABASE_URL falls back to a local SQLite file.
# - NACO_OFFLINE holds every knob of the offline worker: bump the versions
#   to rotate the cache partitions.
#
from pathlib import Path
import os

import dj_database_url
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Security
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "naco-dev-insecure-key")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "corsheaders",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework.authtoken",
    "booking",
    "notifications",
    "offline",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "naco_marketplace.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "naco_marketplace.wsgi.application"

DATABASES = {
    "default": dj_database_url.config(
        default=os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
    )
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Africa/Lagos"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# CORS: the single-page frontend is served from another origin.
CORS_ALLOW_ALL_ORIGINS = os.getenv("CORS_ALLOW_ALL_ORIGINS", "1") == "1"
CORS_ALLOW_HEADERS = (
    "accept",
    "authorization",
    "content-type",
    "if-match",
    "origin",
    "x-csrftoken",
    "x-requested-with",
)

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "naco_marketplace.authentication.BearerTokenAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("NACO_LOG_LEVEL", "INFO"),
    },
}

# Booking reference codes look like NACO-7F3K2Q9ZD
NACO_BOOKING_REFERENCE_PREFIX = os.getenv("NACO_BOOKING_REFERENCE_PREFIX", "NACO")

# Offline worker (cache partitions, outbox, analytics queue)
NACO_OFFLINE = {
    "STATIC_VERSION": os.getenv("NACO_STATIC_VERSION", "v1.5.9"),
    "API_VERSION": os.getenv("NACO_API_VERSION", "v1.5.9"),
    "ORIGIN": os.getenv("NACO_ORIGIN", "http://localhost:8091"),
    "BASE_PATH": "/frontend/public",
    "PRECACHE_URLS": [
        "/",
        "/frontend/public/",
        "/frontend/public/index.html",
        "/frontend/public/css/style.css",
        "/frontend/public/js/app.js",
        "/frontend/public/js/api.js",
        "/frontend/public/manifest.json",
        "/frontend/public/assets/icon-192.png",
        "/frontend/public/assets/icon-512.png",
        "/frontend/public/assets/avatar-placeholder.png",
    ],
    "EXTERNAL_ORIGINS": [
        "https://fonts.googleapis.com",
        "https://fonts.gstatic.com",
        "https://cdnjs.cloudflare.com",
        "https://unpkg.com",
        "https://cdn.jsdelivr.net",
    ],
    "EXTERNAL_TIMEOUT": 5.0,
    "API_PREFIXES": [
        "/auth",
        "/users",
        "/artisans",
        "/bookings",
        "/reviews",
        "/notifications",
        "/favorites",
        "/api/",
    ],
    "LIVE_ONLY_PATTERNS": [
        r"^/artisans/[^/]+/?$",
        r"^/users/[^/]+/?$",
        r"^/api/collections/users/records/",
    ],
    "ANALYTICS_ENDPOINT": "/analytics/offline",
    "BACKGROUND_SYNC": os.getenv("NACO_BACKGROUND_SYNC", "1") == "1",
    "SKIP_WAITING_ON_INSTALL": True,
}
