"""
Django settings for billing_project.

Everything deployment specific is read from the environment so the same
module serves local development, the test suite and production.
"""
import os
from decimal import Decimal
from pathlib import Path


def _env(name, default=""):
    value = os.environ.get(name)
    return value if value not in (None, "") else default


def _env_bool(name, default=False):
    return _env(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = _env("DJANGO_SECRET_KEY", "django-insecure-billing-ledger-dev-key")
DEBUG = _env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [h.strip() for h in _env("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "ledger_core.apps.LedgerCoreConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "billing_project.urls"

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

# ---------- Database ----------
# SQLite for development and tests; set BILLING_DB_ENGINE=postgresql in
# production so select_for_update() and row locks are real
_db_engine = _env("BILLING_DB_ENGINE", "sqlite3")
if _db_engine == "sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": _env("BILLING_DB_NAME", str(BASE_DIR / "db.sqlite3")),
            # writers queue on BEGIN IMMEDIATE instead of failing with "database is locked"
            "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
            # on disk so threaded tests share one database
            "TEST": {"NAME": _env("BILLING_TEST_DB_NAME", str(BASE_DIR / "test_db.sqlite3"))},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": f"django.db.backends.{_db_engine}",
            "NAME": _env("BILLING_DB_NAME", "billing"),
            "USER": _env("BILLING_DB_USER", "billing"),
            "PASSWORD": _env("BILLING_DB_PASSWORD"),
            "HOST": _env("BILLING_DB_HOST", "127.0.0.1"),
            "PORT": _env("BILLING_DB_PORT", "5432"),
            "ATOMIC_REQUESTS": False,
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = _env("BILLING_TIME_ZONE", "Africa/Lagos")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# ---------- Billing ledger ----------
BILLING_DEFAULT_VAT_RATE = Decimal(_env("BILLING_DEFAULT_VAT_RATE", "7.5"))

# Defaults used when the Station singleton is created lazily
BILLING_STATION_DEFAULTS = {
    "name": _env("STATION_NAME", "Emirate FM 98.5 FM"),
    "address": _env(
        "STATION_ADDRESS",
        "Behind Federal Ministry of Environment, Off Jebba Road, "
        "Ilorin, Kwara State, Nigeria.",
    ),
    "phone": _env("STATION_PHONE"),
    "email": _env("STATION_EMAIL"),
    "invoice_prefix": _env("INVOICE_PREFIX", "EFM/ADV/"),
    "receipt_prefix": _env("RECEIPT_PREFIX", "REC/"),
}

BILLING_DEFAULT_PAYMENT_TERMS = _env(
    "BILLING_DEFAULT_PAYMENT_TERMS",
    "This bill is issued in advance and payment must be made "
    "before commencement of broadcast.",
)

# How often a number allocation is attempted before SequencingError
BILLING_SEQUENCE_MAX_ATTEMPTS = int(_env("BILLING_SEQUENCE_MAX_ATTEMPTS", "3"))

# Major / minor unit names used for amount_in_words
BILLING_CURRENCY_WORDS = (
    _env("BILLING_CURRENCY_MAJOR", "Naira"),
    _env("BILLING_CURRENCY_MINOR", "Kobo"),
)

# ---------- Celery ----------
CELERY_BROKER_URL = _env("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = _env("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
CELERY_TASK_ALWAYS_EAGER = _env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    # drain aggregates flagged by a failed rollup / invoice refresh
    "repair-flagged-ledger-aggregates": {
        "task": "ledger_core.tasks.repair_flagged_aggregates",
        "schedule": float(_env("BILLING_REPAIR_INTERVAL_SECONDS", "300")),
    },
}

# ---------- Logging ----------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "ledger_core": {
            "handlers": ["console"],
            "level": _env("BILLING_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
