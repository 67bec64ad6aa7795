# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (fast, isolated)
- MD5 hasher (fast user creation)
- Throttling disabled so API tests never hit rate limits
- Quiet logging
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

ALLOW_NEGATIVE_STOCK = False
FOLIO_PAD_WIDTH = 5

LOGGING = {
    **LOGGING,
    "root": {"handlers": ["console"], "level": "CRITICAL"},
}
