"""상품 카탈로그 조회 서비스

배송비/주문 집계 로직이 ORM 모델에 직접 의존하지 않도록
Product 모델을 읽기 전용 CatalogProduct 로 변환해서 제공합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from ..models.product import Product
from .weight_service import ProductWeightSpec


@dataclass(frozen=True)
class CatalogProduct(ProductWeightSpec):
    """카탈로그 상품 (중량 + 가격/재고/상태)"""

    name: str = ""
    price: Decimal = Decimal("0")
    stock: int = 0
    status: str = Product.Status.ON_SALE

    @classmethod
    def from_model(cls, product: Product) -> CatalogProduct:
        return cls(
            id=product.pk,
            weight=product.weight,
            weight_unit=product.weight_unit,
            name=product.name,
            price=product.price,
            stock=product.stock,
            status=product.status,
        )


def _to_pk(value: Any) -> int | None:
    """요청에서 넘어온 상품 ID를 PK로 변환 (숫자가 아니면 None)"""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class ProductCatalog:
    """Product 모델 기반 카탈로그"""

    @staticmethod
    def get_by_id(product_id: Any) -> CatalogProduct | None:
        pk = _to_pk(product_id)
        if pk is None:
            return None
        product = Product.objects.filter(pk=pk).first()
        return CatalogProduct.from_model(product) if product else None

    @staticmethod
    def get_by_ids(product_ids: Iterable[Any]) -> dict[int, CatalogProduct]:
        """여러 상품을 한 번의 쿼리로 조회 (없는 ID는 결과에서 빠짐)"""
        pks = {pk for pk in (_to_pk(value) for value in product_ids) if pk is not None}
        if not pks:
            return {}
        return {product.pk: CatalogProduct.from_model(product) for product in Product.objects.filter(pk__in=pks)}

    @staticmethod
    def get_all(in_stock: bool = False) -> list[CatalogProduct]:
        """
        상품 목록 조회

        Args:
            in_stock: True면 판매중이고 재고가 있는 상품만
        """
        queryset = Product.objects.all()
        if in_stock:
            queryset = queryset.filter(status=Product.Status.ON_SALE, stock__gt=0)
        return [CatalogProduct.from_model(product) for product in queryset]
