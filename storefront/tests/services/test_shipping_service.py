"""ShippingCostService 단위 테스트"""

import asyncio
import logging
import math
from decimal import Decimal

import pytest

from storefront.services.catalog_service import CatalogProduct, ProductCatalog
from storefront.services.location_resolver import LocationResolver
from storefront.services.rate_table import RateEntry, RateTable, TierRates
from storefront.services.shipping_service import (
    LocalShippingQuoter,
    ShippingCostService,
    ShippingQuote,
    WeightTier,
    get_shipping_service,
)
from storefront.tests.conftest import FALLBACK_COST, TOKYO_TIER2, TOKYO_TIER5, TOKYO_TIER10
from storefront.tests.factories import ProductFactory


class TestSelectTier:
    """중량 구간 경계 테스트"""

    @pytest.mark.parametrize(
        "weight, tier",
        [
            (Decimal("0.1"), WeightTier.TIER2),
            (Decimal("2.0"), WeightTier.TIER2),
            (Decimal("2.01"), WeightTier.TIER5),
            (Decimal("5.0"), WeightTier.TIER5),
            (Decimal("5.01"), WeightTier.TIER10),
            (Decimal("10"), WeightTier.TIER10),
            (Decimal("50"), WeightTier.TIER10),
        ],
    )
    def test_select_tier(self, weight, tier):
        assert ShippingCostService.select_tier(weight) == tier


class TestCalculate:
    """배송비 계산 테스트"""

    @pytest.mark.parametrize(
        "weight, expected",
        [
            (Decimal("2.0"), TOKYO_TIER2),
            (Decimal("2.01"), TOKYO_TIER5),
            (Decimal("5.0"), TOKYO_TIER5),
            (Decimal("5.01"), TOKYO_TIER10),
            (Decimal("50"), TOKYO_TIER10),
        ],
    )
    def test_tier_prices(self, shipping_service, weight, expected):
        assert shipping_service.calculate(weight, "東京都") == expected

    def test_accepts_int_and_float_weights(self, shipping_service):
        assert shipping_service.calculate(1, "東京都") == TOKYO_TIER2
        assert shipping_service.calculate(3.5, "東京都") == TOKYO_TIER5

    def test_resolves_city_and_unsuffixed_names(self, shipping_service):
        """시/구 이름, 접미사 없는 이름도 요금표 도도부현으로 변환"""
        assert shipping_service.calculate(Decimal("1"), "札幌市") == 1100
        assert shipping_service.calculate(Decimal("1"), "東京") == TOKYO_TIER2
        assert shipping_service.calculate(Decimal("1"), "新宿区") == TOKYO_TIER2
        assert shipping_service.calculate(Decimal("3"), "大阪") == 950

    def test_custom_fallback_cost(self, rate_table):
        service = ShippingCostService(rate_table, fallback_cost=700)

        assert service.calculate(Decimal("1"), "Atlantis") == 700

    def test_injected_resolver_is_used(self, rate_table):
        """생성자로 주입한 resolver 사용"""
        resolver = LocationResolver(rate_table.prefectures, aliases={"横浜市": "神奈川県"})
        service = ShippingCostService(rate_table, resolver=resolver)

        assert service.calculate(Decimal("1"), "横浜市") == 600


class TestCalculateFallback:
    """기본 배송비 대체 테스트 (예외를 던지지 않음)"""

    @pytest.mark.parametrize(
        "weight, destination",
        [
            (None, "東京都"),
            (0, "東京都"),
            (Decimal("0"), "東京都"),
            (-1, "東京都"),
            ("abc", "東京都"),
            (float("nan"), "東京都"),
            (float("inf"), "東京都"),
            (True, "東京都"),
            (Decimal("1"), None),
            (Decimal("1"), ""),
            (Decimal("1"), "   "),
            (Decimal("1"), 13),
            (Decimal("1"), "Atlantis"),
        ],
    )
    def test_invalid_input_returns_fallback(self, shipping_service, weight, destination):
        # Act
        cost = shipping_service.calculate(weight, destination)

        # Assert
        assert cost == FALLBACK_COST
        assert isinstance(cost, int)

    def test_unresolved_destination_is_logged(self, shipping_service, caplog):
        """변환 실패한 입력값을 WARNING 으로 기록"""
        with caplog.at_level(logging.WARNING, logger="storefront.services.shipping_service"):
            shipping_service.calculate(Decimal("1"), "Atlantis")

        assert any(record.levelno == logging.WARNING and "Atlantis" in record.getMessage() for record in caplog.records)

    def test_missing_rate_row(self, rate_table):
        """변환된 도도부현이 요금표에 없음"""
        resolver = LocationResolver(rate_table.prefectures, aliases={"那覇市": "沖縄県"})
        service = ShippingCostService(rate_table, resolver=resolver)

        assert service.calculate(Decimal("1"), "那覇市") == FALLBACK_COST

    def test_rate_table_unavailable(self, tmp_path, caplog):
        """요금표를 읽을 수 없으면 ERROR 로그 후 기본 배송비"""
        service = ShippingCostService(RateTable(tmp_path / "missing.csv"))

        with caplog.at_level(logging.ERROR, logger="storefront.services"):
            cost = service.calculate(Decimal("1"), "東京都")

        assert cost == FALLBACK_COST
        assert any(record.levelno == logging.ERROR for record in caplog.records)

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), "800", None, Decimal("NaN")])
    def test_non_numeric_price(self, mocker, price):
        """요금 값이 유한한 숫자가 아니면 기본 배송비"""
        # Arrange
        rate_table = mocker.Mock()
        rate_table.prefectures = ("東京都",)
        rate_table.lookup.return_value = RateEntry(
            region="関東",
            prefecture="東京都",
            rates=TierRates(tier2=price, tier5=800, tier10=1200),
        )
        service = ShippingCostService(rate_table)

        # Act & Assert
        assert service.calculate(Decimal("1"), "東京都") == FALLBACK_COST

    @pytest.mark.parametrize(
        "weight",
        [None, 0, -5, 0.001, 1, 2, 2.5, 5, 7, 10, 11, 1000, math.pi, "1", "", [], {}],
    )
    @pytest.mark.parametrize("destination", [None, "", "東京都", "京", "札幌市", "Atlantis", "🗾", 0])
    def test_never_raises(self, shipping_service, weight, destination):
        """어떤 입력에도 0 이상의 정수 반환"""
        cost = shipping_service.calculate(weight, destination)

        assert isinstance(cost, int)
        assert cost >= 0


class FakeCatalog:
    """DB 없이 quote_items 를 테스트하기 위한 카탈로그"""

    def __init__(self, products):
        self.products = {str(product.id): product for product in products}
        self.requested = []

    def get_by_ids(self, product_ids):
        product_ids = list(product_ids)
        self.requested.extend(product_ids)
        return {key: self.products[key] for key in product_ids if key in self.products}


class TestQuoteItems:
    """상품 목록 기준 배송비 견적 테스트"""

    def test_catalog_weights(self, shipping_service, catalog_products):
        """A(1.5kg)×2 + B(500g)×1 = 3.5kg → 5kg 구간"""
        # Arrange
        items = [{"productId": 1, "quantity": 2}, {"productId": 2, "quantity": 1}]

        # Act
        quote = shipping_service.quote_items(items, "東京都", FakeCatalog(catalog_products))

        # Assert
        assert quote == ShippingQuote(total_weight=Decimal("3.5"), prefecture="東京都", shipping_cost=TOKYO_TIER5)

    def test_weight_override_skips_catalog(self, shipping_service, catalog_products):
        """weight 가 있으면 상품 조회 없이 weight * quantity"""
        # Arrange
        catalog = FakeCatalog(catalog_products)
        items = [{"productId": 1, "quantity": 3, "weight": 2}]

        # Act
        quote = shipping_service.quote_items(items, "東京都", catalog)

        # Assert
        assert quote.total_weight == Decimal("6")
        assert quote.shipping_cost == TOKYO_TIER10
        assert catalog.requested == []

    def test_invalid_items_are_skipped(self, shipping_service, catalog_products):
        """수량 0/음수/누락, 상품 ID 누락, 없는 상품은 제외"""
        items = [
            {"productId": 1, "quantity": 0},
            {"productId": 1, "quantity": -2},
            {"productId": 1},
            {"quantity": 5},
            {"productId": 999, "quantity": 1},
            {"productId": 2, "quantity": "abc"},
            {"productId": 2, "quantity": 2},
        ]

        quote = shipping_service.quote_items(items, "東京都", FakeCatalog(catalog_products))

        assert quote.total_weight == Decimal("1.0")
        assert quote.shipping_cost == TOKYO_TIER2

    @pytest.mark.parametrize(
        "item",
        [
            {"productId": 1, "quantity": 1.5},
            {"quantity": 1.5, "weight": 1.5},
            {"productId": 1, "quantity": "0.5"},
        ],
    )
    def test_fractional_quantity_is_skipped(self, shipping_service, catalog_products, item):
        """소수 수량은 카탈로그/weight 지정 여부와 관계없이 제외"""
        quote = shipping_service.quote_items([item], "東京都", FakeCatalog(catalog_products))

        assert quote.total_weight == Decimal("0")
        assert quote.shipping_cost == FALLBACK_COST

    def test_integral_quantity_forms_are_equivalent(self, shipping_service, catalog_products):
        """카탈로그 경로와 weight 지정 경로가 같은 중량을 계산"""
        catalog = FakeCatalog(catalog_products)

        from_catalog = shipping_service.quote_items([{"productId": 1, "quantity": "2"}], "東京都", catalog)
        from_override = shipping_service.quote_items([{"quantity": 2.0, "weight": 1.5}], "東京都", catalog)

        assert from_catalog.total_weight == from_override.total_weight == Decimal("3")
        assert from_catalog.shipping_cost == from_override.shipping_cost == TOKYO_TIER5

    def test_no_weight_returns_fallback(self, shipping_service, catalog_products):
        """총 중량 0 이면 기본 배송비"""
        quote = shipping_service.quote_items([], "東京都", FakeCatalog(catalog_products))

        assert quote.total_weight == Decimal("0")
        assert quote.shipping_cost == FALLBACK_COST

    def test_to_response(self):
        quote = ShippingQuote(total_weight=Decimal("3.5"), prefecture="東京都", shipping_cost=800)

        assert quote.to_response() == {"totalWeight": 3.5, "prefecture": "東京都", "shippingCost": 800}

    @pytest.mark.django_db
    def test_with_product_catalog(self, shipping_service):
        """Product 모델 기반 카탈로그"""
        # Arrange
        product_a = ProductFactory(weight=Decimal("1.5"))
        product_b = ProductFactory.in_grams(500)
        items = [
            {"productId": product_a.id, "quantity": 2},
            {"productId": str(product_b.id), "quantity": 1},
        ]

        # Act
        quote = shipping_service.quote_items(items, "東京都", ProductCatalog)

        # Assert
        assert quote.total_weight == Decimal("3.5")
        assert quote.shipping_cost == TOKYO_TIER5


class TestLocalShippingQuoter:
    def test_quotes_through_service(self, shipping_service):
        quoter = LocalShippingQuoter(shipping_service)

        cost = asyncio.run(quoter(Decimal("3.5"), "東京都"))

        assert cost == TOKYO_TIER5


class TestGetShippingService:
    """settings 기반 공용 인스턴스"""

    def test_uses_settings(self, settings, rate_csv):
        # Arrange
        settings.SHIPPING_RATES_CSV = str(rate_csv)
        settings.SHIPPING_FALLBACK_COST = 450

        # Act
        service = get_shipping_service()

        # Assert
        assert service is get_shipping_service()
        assert service.rate_table.source_path == rate_csv
        assert service.calculate(Decimal("1"), "Atlantis") == 450
        assert service.calculate(Decimal("1"), "東京都") == TOKYO_TIER2

    def test_default_table_has_all_prefectures(self):
        """기본 제공 요금표 (47개 도도부현)"""
        entries = get_shipping_service().rate_table.load()

        assert len(entries) == 47
        assert get_shipping_service().rate_table.lookup("東京都").rates == TierRates(600, 800, 1200)
