"""
API 엔드포인트 Rate Limiting (속도 제한) 클래스

- 배송비 계산: 주문 화면에서 수량/주소 변경마다 호출되므로 넉넉하게, 단 남용은 방지
- 전역 제한: 모든 API 요청에 대한 기본 제한

local/production 에서는 django-redis 캐시 백엔드를 사용하므로
여러 워커 프로세스 사이에서도 같은 카운터를 공유합니다.
"""

from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


# ============================================================
# 배송비 관련 Throttles
# ============================================================


class ShippingCalculateRateThrottle(AnonRateThrottle):
    """
    배송비 계산 엔드포인트 속도 제한

    제한: IP 주소당 1분에 60회 (production)

    적용 대상: ShippingCalculateView
    """

    scope = "shipping_calculate"


# ============================================================
# 전역 Throttles
# ============================================================


class GlobalAnonRateThrottle(AnonRateThrottle):
    """
    비인증 사용자 전역 속도 제한

    제한: IP 주소당 1시간에 1000회
    """

    scope = "anon_global"


class GlobalUserRateThrottle(UserRateThrottle):
    """
    인증 사용자 전역 속도 제한

    제한: 사용자당 1시간에 5000회
    """

    scope = "user_global"
