"""
Logging Configuration
배송비 계산/주문 작성 로깅 설정

- 콘솔: 모든 storefront 로거
- 파일 (logs/shipping.log): 서비스/뷰 로그. 요금표 로드 실패, 기본 배송비 대체 등 운영에서 추적할 내용

.env 파일 예시:
    LOG_DIR=/var/log/farmshop
    LOG_FILE_MAX_BYTES=10485760
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

LOGS_DIR = Path(os.environ.get("LOG_DIR", BASE_DIR / "logs"))
LOG_FILE_MAX_BYTES = int(os.environ.get("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))
LOG_FILE_BACKUP_COUNT = 5

STOREFRONT_LOGGERS = ("storefront.services", "storefront.views", "storefront.utils")


def get_logging_config(debug: bool = False, log_to_file: bool = True) -> dict:
    """
    환경에 맞는 로깅 설정

    Args:
        debug: True 면 storefront 로거를 DEBUG 레벨로
        log_to_file: False 면 파일 핸들러 없이 콘솔만 (테스트)
    """
    level = "DEBUG" if debug else "INFO"

    handlers = {
        "console": {
            "level": level,
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    }
    if log_to_file:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handlers["shipping_file"] = {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": LOGS_DIR / "shipping.log",
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUP_COUNT,
            "encoding": "utf-8",
            "formatter": "verbose",
        }

    loggers = {
        # 400/500 응답 자동 로깅
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    }
    for name in STOREFRONT_LOGGERS:
        # 외부 API(utils) 로그는 콘솔만
        file_handlers = ["shipping_file"] if log_to_file and name != "storefront.utils" else []
        loggers[name] = {
            "handlers": ["console", *file_handlers],
            "level": level,
            "propagate": False,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {name} {process:d} {message}",
                "style": "{",
            },
            "simple": {
                "format": "{levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    }
