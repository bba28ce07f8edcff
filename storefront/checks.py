"""배송비 요금표 시스템 체크

요금표를 읽을 수 없으면 배송비가 모두 기본 배송비로 대체되므로
기동 시점에 에러로 드러나도록 합니다.
"""

from django.core.checks import Error, register

from .services.rate_table import DataSourceUnavailable
from .services.shipping_service import get_shipping_service


@register()
def check_shipping_rate_table(app_configs, **kwargs):
    rate_table = get_shipping_service().rate_table
    try:
        rate_table.load()
    except DataSourceUnavailable as e:
        return [
            Error(
                e.message,
                hint="SHIPPING_RATES_CSV 설정과 CSV 파일(地域, 都道府県名, 2kg/5kg/10kgまでの料金)을 확인하세요.",
                obj=str(rate_table.source_path),
                id="storefront.E001",
            )
        ]
    return []
