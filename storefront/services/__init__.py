"""
배송비 계산 / 주문 작성 서비스 패키지

서비스 레이어 구성 (의존 순서):
- rate_table: CSV 요금표 로드/캐시
- location_resolver: 배송지 문자열 → 도도부현
- shipping_service: 중량 구간 선택, 배송비 계산
- weight_service: 상품 중량 합계
- order_composer: 복수 배송지 주문 작성, 합계 계산
"""

from .base import ServiceError, log_service_call
from .catalog_service import CatalogProduct, ProductCatalog
from .location_resolver import LocationNotResolved, LocationResolver, Resolution
from .order_composer import (
    CannotRemovePrimaryDestination,
    EmptyOrder,
    IncompleteDestinationAddress,
    IncompleteSenderInfo,
    InvalidPaymentMethod,
    InvalidQuantity,
    InvalidStepTransition,
    OrderComposer,
    OrderComposerError,
    OrderDraftLocked,
    OrderStep,
    OrderTotals,
    PaymentMethod,
    UnknownDestination,
)
from .rate_table import DataSourceUnavailable, RateEntry, RateTable, TierRates
from .shipping_service import (
    FALLBACK_SHIPPING_COST,
    LocalShippingQuoter,
    ShippingCostService,
    ShippingQuote,
    WeightTier,
    get_shipping_service,
)
from .weight_service import ProductWeightSpec, WeightAggregator

__all__ = [
    # Base
    "ServiceError",
    "log_service_call",
    # Rate table / location
    "DataSourceUnavailable",
    "RateEntry",
    "RateTable",
    "TierRates",
    "LocationNotResolved",
    "LocationResolver",
    "Resolution",
    # Shipping
    "FALLBACK_SHIPPING_COST",
    "LocalShippingQuoter",
    "ShippingCostService",
    "ShippingQuote",
    "WeightTier",
    "get_shipping_service",
    # Catalog / weight
    "CatalogProduct",
    "ProductCatalog",
    "ProductWeightSpec",
    "WeightAggregator",
    # Order
    "CannotRemovePrimaryDestination",
    "EmptyOrder",
    "IncompleteDestinationAddress",
    "IncompleteSenderInfo",
    "InvalidPaymentMethod",
    "InvalidQuantity",
    "InvalidStepTransition",
    "OrderComposer",
    "OrderComposerError",
    "OrderDraftLocked",
    "OrderStep",
    "OrderTotals",
    "PaymentMethod",
    "UnknownDestination",
]
