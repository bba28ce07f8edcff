"""
Django Test Settings
테스트 환경 전용 설정 (pytest, Django test)
"""

import os

from farmshop.settings.base import *  # noqa: F401, F403
from farmshop.settings.components.logging import get_logging_config

# ==========================================================================
# Test Mode Flag
# ==========================================================================

TESTING = True
DEBUG = True

# ==========================================================================
# Database (기본 SQLite, DATABASE_ENGINE 지정 시 PostgreSQL 등 사용)
# ==========================================================================

DATABASES = {
    "default": {
        "ENGINE": os.getenv("DATABASE_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DATABASE_NAME", str(BASE_DIR / "test_db.sqlite3")),  # noqa: F405
        "USER": os.getenv("DATABASE_USER", ""),
        "PASSWORD": os.getenv("DATABASE_PASSWORD", ""),
        "HOST": os.getenv("DATABASE_HOST", ""),
        "PORT": os.getenv("DATABASE_PORT", ""),
        # 테스트에서는 연결 즉시 닫기
        "CONN_MAX_AGE": 0,
    }
}

# ==========================================================================
# Cache (LocMem - throttle 카운터용)
# ==========================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# ==========================================================================
# Rate Limiting - 테스트에서는 사실상 비활성화
# ==========================================================================

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "shipping_calculate": "10000/min",
    "anon_global": "100000/hour",
    "user_global": "100000/hour",
}

# ==========================================================================
# Logging (Quiet mode for tests)
# ==========================================================================

LOGGING = get_logging_config(debug=False, log_to_file=False)

# ==========================================================================
# Password Hashing (빠른 해싱 - 테스트 속도 향상)
# ==========================================================================

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# ==========================================================================
# External APIs (테스트에서는 실제 호출하지 않음 - mock 사용)
# ==========================================================================

POSTAL_CODE_API_URL = "https://zipcloud.test/api/search"
STOREFRONT_API_BASE_URL = "http://storefront.test/api"
