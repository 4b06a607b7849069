"""Settings used by the pytest run.

Provides the values production refuses to default (``SECRET_KEY``) and
swaps slow or external services for in-process ones.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("PAYHERE_MERCHANT_ID", "1211149")
os.environ.setdefault("PAYHERE_SECRET", "test-merchant-secret")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import BASE_DIR, DATABASES, REST_FRAMEWORK  # noqa: E402

# In-memory SQLite shares one cache across threads and reports "table is
# locked" instead of waiting, so the threaded stock tests need a file.
if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "footwear-store-tests",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        **REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"],
        "anon": "10000/minute",
        "user": "10000/minute",
        "checkout": "1000/minute",
        "order_listing": "1000/minute",
        "payment_notify": "1000/minute",
    },
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
