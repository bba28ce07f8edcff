from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings

import requests
from asgiref.sync import sync_to_async

from ..services.shipping_service import FALLBACK_SHIPPING_COST

logger = logging.getLogger(__name__)


class StorefrontApiClient:
    """
    스토어 API 클라이언트 (주문 화면 → 서버)

    - calculate_shipping: POST /shipping/calculate/
    - create_order: POST /orders/
    """

    def __init__(self, base_url: str | None = None, timeout: int | None = None) -> None:
        self.base_url: str = (base_url or settings.STOREFRONT_API_BASE_URL).rstrip("/")
        self.timeout: int = timeout or settings.STOREFRONT_API_TIMEOUT
        self.headers: dict[str, str] = {
            "Content-Type": "application/json",
        }

    def calculate_shipping(self, weight_kg: Decimal | float, prefecture: str) -> int:
        """
        배송비 계산 요청 (중량 직접 지정)

        Args:
            weight_kg: 총 중량 (kg)
            prefecture: 배송지 문자열

        Returns:
            배송비. 응답에 숫자로 해석할 수 있는 shippingCost 가 없으면 기본 배송비

        Raises:
            StorefrontApiError: 통신 오류, 2xx 가 아닌 응답
        """
        url = f"{self.base_url}/shipping/calculate/"
        data = {
            "products": [{"quantity": 1, "weight": float(weight_kg)}],
            "prefecture": prefecture,
        }

        result = self._post(url, data, "配送料の計算に失敗しました")
        return parse_shipping_cost(result.get("shippingCost") if isinstance(result, dict) else None)

    def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        주문 생성 요청

        Args:
            payload: OrderComposer.build_submission() 결과

        Returns:
            저장된 주문

        Raises:
            StorefrontApiError: 통신 오류, 2xx 가 아닌 응답
        """
        url = f"{self.base_url}/orders/"
        return self._post(url, payload, "注文の処理中にエラーが発生しました。")

    async def acreate_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """OrderComposer.submit 용 비동기 버전"""
        return await sync_to_async(self.create_order, thread_sensitive=False)(payload)

    def _post(self, url: str, data: dict[str, Any], default_message: str) -> Any:
        try:
            response = requests.post(url, json=data, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise StorefrontApiError(
                code="NETWORK_ERROR",
                message=f"ネットワークエラー: {str(e)}",
                status_code=503,
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        if 200 <= response.status_code < 300:
            return body

        error_message = body.get("error") if isinstance(body, dict) else None
        raise StorefrontApiError(
            code=f"HTTP_{response.status_code}",
            message=error_message or default_message,
            status_code=response.status_code,
        )


def parse_shipping_cost(value: Any) -> int:
    """
    응답의 배송비 값을 정수로 변환

    숫자 문자열("800")도 허용하고, 해석할 수 없거나 음수면 기본 배송비를 사용합니다.
    """
    if isinstance(value, bool) or value is None:
        return FALLBACK_SHIPPING_COST
    try:
        cost = Decimal(str(value).strip())
    except ArithmeticError:
        return FALLBACK_SHIPPING_COST
    if not cost.is_finite() or cost < 0:
        return FALLBACK_SHIPPING_COST
    return int(cost)


class ApiShippingQuoter:
    """
    OrderComposer 용 비동기 배송비 조회 (스토어 API 사용)

    통신 오류는 주문 흐름을 막지 않도록 기본 배송비로 대체합니다.
    """

    def __init__(self, client: StorefrontApiClient, fallback_cost: int = FALLBACK_SHIPPING_COST) -> None:
        self.client = client
        self.fallback_cost = fallback_cost

    async def __call__(self, total_weight_kg: Decimal, destination: str) -> int:
        try:
            return await sync_to_async(self.client.calculate_shipping, thread_sensitive=False)(
                total_weight_kg, destination
            )
        except StorefrontApiError as e:
            logger.warning(
                "배송비 API 호출 실패, 기본 배송비 적용: destination=%s, code=%s, message=%s",
                destination,
                e.code,
                e.message,
            )
            return self.fallback_cost


class StorefrontApiError(Exception):
    """
    스토어 API 에러
    """

    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        self.code: str = code
        self.message: str = message
        self.status_code: int = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str | int]:
        """에러를 딕셔너리로 변환"""
        return {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }
