"""배송 서비스 레이어

총 중량과 배송지 문자열로 배송비를 계산합니다.

배송비 계산은 주문 흐름을 절대 막으면 안 되므로 calculate() 는 예외를 던지지 않습니다.
입력 누락, 배송지 변환 실패, 요금표 행 없음, 요금표 로드 실패 등 모든 실패는
고정 배송비(FALLBACK_SHIPPING_COST)로 대체됩니다.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Iterable, Mapping, Protocol

from django.conf import settings

from asgiref.sync import sync_to_async

from .base import log_service_call
from .catalog_service import CatalogProduct
from .location_resolver import LocationNotResolved, LocationResolver
from .rate_table import DataSourceUnavailable, RateEntry, RateTable
from .weight_service import WeightAggregator

logger = logging.getLogger(__name__)

FALLBACK_SHIPPING_COST = 500


class WeightTier(str, enum.Enum):
    """중량 구간 (상한 kg)"""

    TIER2 = "tier2"
    TIER5 = "tier5"
    TIER10 = "tier10"


@dataclass(frozen=True)
class ShippingQuote:
    """배송비 견적 결과"""

    total_weight: Decimal
    prefecture: str
    shipping_cost: int

    def to_response(self) -> dict[str, Any]:
        return {
            "totalWeight": float(self.total_weight),
            "prefecture": self.prefecture,
            "shippingCost": self.shipping_cost,
        }


class CatalogProvider(Protocol):
    def get_by_ids(self, product_ids: Iterable[Any]) -> Mapping[Any, CatalogProduct]: ...


def _to_weight(value: Any) -> Decimal | None:
    """숫자로 해석할 수 없거나 유한하지 않으면 None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        weight = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not weight.is_finite():
        return None
    return weight


def _to_quantity(value: Any) -> int | None:
    """1 이상의 정수 수량 ("2", 2.0 허용). 소수, 0 이하, 해석 불가는 None"""
    quantity = _to_weight(value)
    if quantity is None or quantity <= 0 or quantity != quantity.to_integral_value():
        return None
    return int(quantity)


class ShippingCostService:
    """
    중량/지역별 배송비 계산 서비스

    요금표(RateTable)와 배송지 변환기(LocationResolver)는 생성자로 주입합니다.
    resolver 를 생략하면 요금표의 도도부현 목록으로 처음 계산할 때 만듭니다.

    사용법:
        service = ShippingCostService(RateTable(path))
        service.calculate(Decimal("3.5"), "東京都")  # 5kg 구간 요금
    """

    # 중량 구간 경계 (kg, 이하)
    TIER2_MAX_KG = Decimal("2")
    TIER5_MAX_KG = Decimal("5")

    def __init__(
        self,
        rate_table: RateTable,
        resolver: LocationResolver | None = None,
        fallback_cost: int = FALLBACK_SHIPPING_COST,
    ):
        self.rate_table = rate_table
        self.fallback_cost = fallback_cost
        self._resolver = resolver

    @classmethod
    def select_tier(cls, total_weight_kg: Decimal) -> WeightTier:
        """
        중량 구간 선택

        10kg 를 넘는 구간은 요금표에 없으므로 무거운 화물도 모두 10kg 구간 요금을 사용합니다.
        """
        if total_weight_kg <= cls.TIER2_MAX_KG:
            return WeightTier.TIER2
        if total_weight_kg <= cls.TIER5_MAX_KG:
            return WeightTier.TIER5
        return WeightTier.TIER10

    @property
    def resolver(self) -> LocationResolver:
        if self._resolver is None:
            self._resolver = LocationResolver(self.rate_table.prefectures)
        return self._resolver

    @log_service_call
    def calculate(self, total_weight_kg: Any, destination: Any) -> int:
        """
        배송비 계산 (예외를 던지지 않음)

        Args:
            total_weight_kg: 총 중량 (kg)
            destination: 배송지 문자열 (도도부현명 또는 시/구 이름)

        Returns:
            배송비 (엔). 확정할 수 없으면 fallback_cost
        """
        weight = _to_weight(total_weight_kg)
        text = destination.strip() if isinstance(destination, str) else ""
        if weight is None or weight <= 0 or not text:
            logger.debug(
                "배송비 입력 누락, 기본 배송비 적용: weight=%r, destination=%r",
                total_weight_kg,
                destination,
            )
            return self.fallback_cost

        try:
            resolution = self.resolver.resolve(text)
            entry = self.rate_table.lookup(resolution.prefecture)
        except LocationNotResolved:
            logger.warning("배송지를 도도부현으로 변환할 수 없어 기본 배송비 적용: destination=%s", text)
            return self.fallback_cost
        except DataSourceUnavailable as e:
            logger.error("배송비 요금표를 사용할 수 없어 기본 배송비 적용: %s", e.message)
            return self.fallback_cost

        if entry is None:
            logger.warning(
                "요금표에 도도부현이 없어 기본 배송비 적용: destination=%s, prefecture=%s",
                text,
                resolution.prefecture,
            )
            return self.fallback_cost

        return self._price_for(entry, weight)

    def _price_for(self, entry: RateEntry, weight: Decimal) -> int:
        tier = self.select_tier(weight)
        price = getattr(entry.rates, tier.value)

        if isinstance(price, bool) or not isinstance(price, (int, float, Decimal)):
            logger.error("요금 값이 숫자가 아님: prefecture=%s, tier=%s, value=%r", entry.prefecture, tier.value, price)
            return self.fallback_cost
        if isinstance(price, float) and not math.isfinite(price):
            return self.fallback_cost
        if isinstance(price, Decimal) and not price.is_finite():
            return self.fallback_cost

        logger.debug(
            "배송비 계산 완료: prefecture=%s, weight=%skg, tier=%s, cost=%s",
            entry.prefecture,
            weight,
            tier.value,
            price,
        )
        return int(price)

    @log_service_call
    def quote_items(
        self,
        items: Iterable[Mapping[str, Any]],
        prefecture: str,
        catalog: CatalogProvider,
    ) -> ShippingQuote:
        """
        주문 상품 목록 기준 배송비 견적

        Args:
            items: [{"productId", "quantity", "weight"(선택)}]
                weight 가 있으면 카탈로그 조회 없이 weight * quantity 를 그대로 사용
                quantity 가 1 이상의 정수가 아닌 항목은 두 경우 모두 제외
            prefecture: 배송지 문자열
            catalog: 상품 조회 (get_by_ids 제공, 예: ProductCatalog)

        Returns:
            ShippingQuote: 총 중량, 배송지, 배송비
        """
        override_weight = Decimal("0")
        quantities: dict[str, int] = {}

        for item in items:
            quantity = _to_quantity(item.get("quantity"))
            if quantity is None:
                continue

            weight = _to_weight(item.get("weight"))
            if weight:
                override_weight += weight * quantity
                continue

            product_id = item.get("productId")
            if product_id in (None, ""):
                continue
            key = str(product_id)
            quantities[key] = quantities.get(key, 0) + quantity

        products = catalog.get_by_ids(quantities.keys()).values() if quantities else []
        total_weight = override_weight + WeightAggregator.total_weight(products, quantities)

        shipping_cost = self.calculate(total_weight, prefecture)
        logger.info(
            "배송비 견적: prefecture=%s, total_weight=%skg, shipping_cost=%s",
            prefecture,
            total_weight,
            shipping_cost,
        )
        return ShippingQuote(total_weight=total_weight, prefecture=prefecture, shipping_cost=shipping_cost)


class LocalShippingQuoter:
    """
    OrderComposer 용 비동기 배송비 조회 (같은 프로세스의 ShippingCostService 사용)

    요금표 최초 로드가 파일 I/O 이므로 스레드 풀에서 실행합니다.
    """

    def __init__(self, service: ShippingCostService):
        self.service = service

    async def __call__(self, total_weight_kg: Decimal, destination: str) -> int:
        return await sync_to_async(self.service.calculate, thread_sensitive=False)(total_weight_kg, destination)


@lru_cache(maxsize=1)
def get_shipping_service() -> ShippingCostService:
    """settings 기반 프로세스 공용 ShippingCostService (뷰, 커맨드에서 사용)"""
    return ShippingCostService(
        RateTable(settings.SHIPPING_RATES_CSV),
        fallback_cost=settings.SHIPPING_FALLBACK_COST,
    )
