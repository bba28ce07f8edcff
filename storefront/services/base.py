"""서비스 레이어 공통 모듈

- ServiceError: 도메인 예외의 부모 클래스 (message / code / details)
- log_service_call: 서비스 메서드 실행 시간과 실패를 남기는 데코레이터
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 이 시간(ms)을 넘으면 WARNING (요금표 최초 로드, 대량 상품 조회 등)
SLOW_CALL_THRESHOLD_MS = 100


class ServiceError(Exception):
    """
    서비스 레이어 기본 예외

    Attributes:
        message: 사용자에게 그대로 보여줄 수 있는 문구 (일본어)
        code: 에러 코드. 생략하면 클래스의 default_code
        details: 로그/디버깅용 부가 정보

    사용법:
        class DataSourceUnavailable(ServiceError):
            default_code = "RATE_TABLE_UNAVAILABLE"

        raise DataSourceUnavailable("配送料金表が見つかりません", details={"path": path})
    """

    default_code = "SERVICE_ERROR"

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


def _summarize(args: tuple, kwargs: dict[str, Any]) -> str:
    """로그용 인자 요약 (self 제외, 긴 컬렉션은 길이만)"""
    parts = []
    for value in args[1:]:
        if isinstance(value, (list, tuple, dict, set)) and len(value) > 5:
            parts.append(f"<{type(value).__name__} len={len(value)}>")
        else:
            parts.append(repr(value))
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return ", ".join(parts)


def log_service_call(func: Callable[..., T]) -> Callable[..., T]:
    """
    서비스 메서드 호출 로깅 데코레이터

    - DEBUG: 호출 인자와 실행 시간
    - WARNING: 느린 실행, ServiceError (비즈니스 에러)
    - ERROR: 그 외 예외 (스택 트레이스 포함)

    예외는 기록만 하고 그대로 다시 던집니다.

    사용법:
        class ShippingCostService:
            @log_service_call
            def calculate(self, total_weight_kg, destination):
                ...
    """
    label = func.__qualname__  # 예: ShippingCostService.calculate

    @wraps(func)
    def wrapper(*args, **kwargs) -> T:
        start = time.perf_counter()
        logger.debug("[%s] 호출 | %s", label, _summarize(args, kwargs))

        try:
            result = func(*args, **kwargs)
        except ServiceError as e:
            logger.warning(
                "[%s] 비즈니스 에러 | code=%s, message=%s, elapsed=%.2fms",
                label,
                e.code,
                e.message,
                (time.perf_counter() - start) * 1000,
            )
            raise
        except Exception as e:
            logger.error(
                "[%s] 예외 발생 | error=%s, elapsed=%.2fms",
                label,
                e,
                (time.perf_counter() - start) * 1000,
                exc_info=True,
            )
            raise

        elapsed = (time.perf_counter() - start) * 1000
        if elapsed > SLOW_CALL_THRESHOLD_MS:
            logger.warning("[%s] 느린 실행 감지 | elapsed=%.2fms", label, elapsed)
        else:
            logger.debug("[%s] 완료 | elapsed=%.2fms", label, elapsed)
        return result

    return wrapper
