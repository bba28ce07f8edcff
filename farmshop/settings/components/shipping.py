"""
Shipping Configuration
배송비 요금표, 우편번호 검색, 스토어 API 클라이언트 설정을 관리합니다.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# ==========================================
# 배송비 요금표
# ==========================================
#
# .env 파일 예시:
# SHIPPING_RATES_CSV=/srv/farmshop/data/postage.csv
# SHIPPING_FALLBACK_COST=500
#
# CSV 헤더: 地域,都道府県名,2kgまでの料金,5kgまでの料金,10kgまでの料金

SHIPPING_RATES_CSV = os.environ.get(
    "SHIPPING_RATES_CSV",
    str(BASE_DIR / "storefront" / "data" / "postage.csv"),
)

# 요금을 확정할 수 없을 때 사용하는 고정 배송비 (엔 단위)
SHIPPING_FALLBACK_COST = int(os.environ.get("SHIPPING_FALLBACK_COST", 500))

# ==========================================
# 우편번호 검색 (zipcloud)
# ==========================================

POSTAL_CODE_API_URL = os.environ.get(
    "POSTAL_CODE_API_URL",
    "https://zipcloud.ibsnet.co.jp/api/search",
)
POSTAL_CODE_API_TIMEOUT = int(os.environ.get("POSTAL_CODE_API_TIMEOUT", 5))

# ==========================================
# 스토어 API (주문 화면 → 서버)
# ==========================================

STOREFRONT_API_BASE_URL = os.environ.get("STOREFRONT_API_BASE_URL", "http://localhost:8000/api")
STOREFRONT_API_TIMEOUT = int(os.environ.get("STOREFRONT_API_TIMEOUT", 10))
