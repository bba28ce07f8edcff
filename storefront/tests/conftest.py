from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from storefront.services.location_resolver import LocationResolver
from storefront.services.rate_table import RateTable
from storefront.services.shipping_service import FALLBACK_SHIPPING_COST, ShippingCostService, get_shipping_service

# ==========================================
# 0. 테스트 상수 (Business Policy Constants)
# ==========================================

# 비즈니스 정책 상수 (서비스에서 import)
FALLBACK_COST = FALLBACK_SHIPPING_COST

# 테스트 요금표 (東京都 600/800/1200)
RATE_CSV_HEADER = "地域,都道府県名,2kgまでの料金,5kgまでの料金,10kgまでの料金"
RATE_CSV_ROWS = [
    "北海道,北海道,1100,1300,1600",
    "関東,東京都,600,800,1200",
    "関東,神奈川県,600,800,1200",
    "関西,京都府,750,950,1250",
    "関西,大阪府,750,950,1250",
    "関西,兵庫県,750,950,1250",
]

TOKYO_TIER2 = 600
TOKYO_TIER5 = 800
TOKYO_TIER10 = 1200

# ==========================================
# 1. 전역 설정 (Session Scope)
# ==========================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging_for_tests():
    """
    테스트 환경에서 로그 propagation 활성화

    caplog가 로그를 캡처할 수 있도록 propagate=True로 설정
    Session scope: 전체 테스트 세션에서 한 번만 실행
    autouse: 자동으로 모든 테스트에 적용
    """
    import logging

    for logger_name in [
        "storefront.services",
        "storefront.views",
        "storefront.utils",
    ]:
        logger = logging.getLogger(logger_name)
        logger.propagate = True


@pytest.fixture(autouse=True)
def reset_shipping_service():
    """settings 기반 공용 ShippingCostService 캐시 초기화 (테스트 간 격리)"""
    get_shipping_service.cache_clear()
    yield
    get_shipping_service.cache_clear()


# ==========================================
# 2. API 클라이언트 Fixture
# ==========================================


@pytest.fixture
def api_client():
    """
    DRF APIClient 인스턴스

    Function scope: 매 테스트마다 새로운 클라이언트 생성
    """
    return APIClient()


# ==========================================
# 3. 요금표 Fixture
# ==========================================


@pytest.fixture
def write_rate_csv(tmp_path):
    """
    요금표 CSV 파일 생성 헬퍼

    사용 예시:
        path = write_rate_csv(["関東,東京都,600,800,1200"])
        path = write_rate_csv([...], header="地域,都道府県名")
    """

    def _write(rows, header=RATE_CSV_HEADER, name="postage.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_text("\n".join([header, *rows]) + "\n", encoding=encoding)
        return path

    return _write


@pytest.fixture
def rate_csv(write_rate_csv):
    """기본 테스트 요금표 경로"""
    return write_rate_csv(RATE_CSV_ROWS)


@pytest.fixture
def rate_table(rate_csv):
    return RateTable(rate_csv)


@pytest.fixture
def resolver(rate_table):
    return LocationResolver(rate_table.prefectures)


@pytest.fixture
def shipping_service(rate_table):
    """
    테스트 요금표 기반 ShippingCostService

    - 東京都: 600 / 800 / 1200
    - 기본 배송비: 500
    """
    return ShippingCostService(rate_table)


# ==========================================
# 4. 상품 Fixture
# ==========================================


@pytest.fixture
def catalog_products():
    """
    상품 A (1.5kg, 1000엔) / 상품 B (500g, 2000엔)

    DB 없이 OrderComposer 를 테스트할 때 사용
    """
    from storefront.services.catalog_service import CatalogProduct

    return [
        CatalogProduct(id=1, weight=Decimal("1.5"), weight_unit="kg", name="A", price=Decimal("1000"), stock=10),
        CatalogProduct(id=2, weight=Decimal("500"), weight_unit="g", name="B", price=Decimal("2000"), stock=5),
    ]
