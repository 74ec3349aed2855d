"""
Django settings for the purchase ledger project.
Every tunable can be overridden from the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "apps.exchange.apps.ExchangeConfig",
    "apps.purchases.apps.PurchasesConfig",
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

ROOT_URLCONF = "core.urls"
WSGI_APPLICATION = "core.wsgi.application"

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

# Database
if os.getenv("DB_ENGINE", "sqlite") == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME", "purchases"),
            "USER": os.getenv("DB_USER", "postgres"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "localhost"),
            "PORT": os.getenv("DB_PORT", "5432"),
            "OPTIONS": {
                "options": f"-c statement_timeout={os.getenv('DB_STATEMENT_TIMEOUT_MS', '5000')}",
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
            "OPTIONS": {"timeout": 5},
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Caches: "rates" holds exchange rate buckets and should be shared across instances
RATE_CACHE_URL = os.getenv("RATE_CACHE_URL", "")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "default",
    },
    "rates": (
        {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": RATE_CACHE_URL,
            "KEY_PREFIX": "purchases",
        }
        if RATE_CACHE_URL
        else {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "rates",
        }
    ),
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# REST framework
REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "COERCE_DECIMAL_TO_STRING": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Purchase Ledger API",
    "DESCRIPTION": "Store purchases and retrieve them converted with historical exchange rates",
    "VERSION": "1.0.0",
}

# External rate source
TREASURY_API_URL = os.getenv("TREASURY_API_URL", "https://api.fiscaldata.treasury.gov")

EXCHANGE_RATES = {
    "SOURCE": os.getenv("EXCHANGE_RATE_SOURCE", "treasury"),
    "FALLBACK_MONTHS": int(os.getenv("EXCHANGE_RATE_FALLBACK_MONTHS", "6")),
    "CACHE_TTL_HOURS": int(os.getenv("EXCHANGE_RATE_CACHE_TTL_HOURS", "24")),
    "CACHE_ALIAS": "rates",
    "CACHE_KEY_PREFIX": "exchange_rates_bucket_",
    "PIVOT_CURRENCY": "USD",
    "SOURCE_TIMEOUT_SECONDS": float(os.getenv("EXCHANGE_RATE_SOURCE_TIMEOUT", "10")),
    "RETRY_ATTEMPTS": int(os.getenv("EXCHANGE_RATE_RETRY_ATTEMPTS", "3")),
    "RETRY_BACKOFF_SECONDS": float(os.getenv("EXCHANGE_RATE_RETRY_BACKOFF", "2.0")),
    "CIRCUIT_FAILURE_THRESHOLD": int(os.getenv("EXCHANGE_RATE_CIRCUIT_THRESHOLD", "5")),
    "CIRCUIT_RESET_SECONDS": float(os.getenv("EXCHANGE_RATE_CIRCUIT_RESET", "30")),
}

PURCHASES = {
    "DEFAULT_TARGET_CURRENCY": os.getenv("DEFAULT_TARGET_CURRENCY", "BRL"),
    "DESCRIPTION_MAX_LENGTH": 50,
    "IDEMPOTENCY_KEY_MAX_LENGTH": 255,
}

# Celery
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_BEAT_SCHEDULE = {
    "check-rate-source-health": {
        "task": "check_rate_source_health",
        "schedule": 300.0,
    },
}

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
