"""배송 중량 계산 서비스"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

GRAMS_PER_KG = Decimal("1000")


class WeightUnit:
    KG = "kg"
    G = "g"


@dataclass(frozen=True)
class ProductWeightSpec:
    """배송 중량 계산에 필요한 상품 정보"""

    id: Any
    weight: Decimal
    weight_unit: str = WeightUnit.KG


class WeightAggregator:
    """상품 목록과 수량으로 총 배송 중량(kg)을 계산"""

    @staticmethod
    def to_kg(weight: Decimal | int | float, unit: str) -> Decimal:
        """g 단위면 1000으로 나누고, 그 외에는 kg 값으로 그대로 사용"""
        value = weight if isinstance(weight, Decimal) else Decimal(str(weight))
        if unit == WeightUnit.G:
            return value / GRAMS_PER_KG
        return value

    @staticmethod
    def total_weight(
        catalog: Iterable[ProductWeightSpec],
        quantities: Mapping[Any, int],
    ) -> Decimal:
        """
        총 중량 계산

        Args:
            catalog: 상품 목록
            quantities: 상품 ID → 수량

        Returns:
            총 중량 (kg). 수량이 모두 0이면 0

        Note:
            카탈로그에 없는 상품(삭제/판매 종료 등)은 계산에서 제외합니다.
        """
        products = {str(product.id): product for product in catalog}

        total = Decimal("0")
        for product_id, quantity in quantities.items():
            if not quantity or quantity <= 0:
                continue
            product = products.get(str(product_id))
            if product is None:
                continue
            total += WeightAggregator.to_kg(product.weight, product.weight_unit) * quantity
        return total
