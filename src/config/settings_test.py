"""Settings for the test suite.

Supplies the values ``config.settings`` refuses to default, then swaps
Redis for in-process backends.
"""

import os

from decouple import config
from dj_database_url import parse as db_url

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-use-0123456789")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import REST_FRAMEWORK  # noqa: E402

# In-memory sqlite by default; point TEST_DATABASE_URL at PostgreSQL to run
# the threaded race tests, which need row-level write concurrency.
DATABASES = {
    "default": config("TEST_DATABASE_URL", default="sqlite://:memory:", cast=db_url)
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

REST_FRAMEWORK = {**REST_FRAMEWORK, "DEFAULT_THROTTLE_CLASSES": []}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
