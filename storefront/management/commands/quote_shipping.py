"""
배송비 조회 Management Command

요금표와 배송지 변환 결과를 터미널에서 확인합니다.

사용 예시:
    python manage.py quote_shipping --weight 3.5 --destination 東京都
    python manage.py quote_shipping --weight 1 --destination 札幌市
    python manage.py quote_shipping --list
"""

import argparse
from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from storefront.services.location_resolver import LocationNotResolved
from storefront.services.rate_table import DataSourceUnavailable, RateTable
from storefront.services.shipping_service import ShippingCostService, get_shipping_service


def weight_kg(value):
    try:
        weight = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"숫자가 아닌 중량입니다: {value}")
    if not weight.is_finite():
        raise argparse.ArgumentTypeError(f"숫자가 아닌 중량입니다: {value}")
    return weight


class Command(BaseCommand):
    help = "중량과 배송지로 배송비를 조회합니다 (--list: 요금표 전체 출력)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--weight",
            type=weight_kg,
            help="총 중량 (kg)",
        )
        parser.add_argument(
            "--destination",
            help="배송지 (도도부현명 또는 시/구 이름)",
        )
        parser.add_argument(
            "--list",
            action="store_true",
            help="요금표 전체 출력",
        )
        parser.add_argument(
            "--csv",
            help="요금표 CSV 경로 (기본: settings.SHIPPING_RATES_CSV)",
        )

    def handle(self, *args, **options):
        service = ShippingCostService(RateTable(options["csv"])) if options["csv"] else get_shipping_service()

        try:
            if options["list"]:
                self._print_table(service)
            else:
                if options["weight"] is None or not options["destination"]:
                    raise CommandError("--weight 와 --destination 을 함께 지정하거나 --list 를 사용하세요.")
                self._print_quote(service, options["weight"], options["destination"])
        except DataSourceUnavailable as e:
            raise CommandError(f"배송비 요금표를 읽을 수 없습니다: {e.message}")

    def _print_table(self, service):
        entries = service.rate_table.entries()

        self.stdout.write(self.style.WARNING(f"=== 배송비 요금표 ({len(entries)}개 지역) ==="))
        self.stdout.write(f"{'地域':<6}{'都道府県名':<8}{'~2kg':>8}{'~5kg':>8}{'~10kg':>8}")
        for entry in entries:
            rates = entry.rates
            self.stdout.write(
                f"{entry.region:<6}{entry.prefecture:<8}{rates.tier2:>8}{rates.tier5:>8}{rates.tier10:>8}"
            )

    def _print_quote(self, service, weight, destination):
        # 요금표 오류는 기본 배송비로 숨기지 않고 CommandError 로 알린다
        service.rate_table.load()

        self.stdout.write(self.style.WARNING("=== 배송비 조회 ==="))
        self.stdout.write(f"중량: {weight}kg")
        self.stdout.write(f"배송지: {destination}")

        try:
            resolution = service.resolver.resolve(destination)
        except LocationNotResolved:
            self.stdout.write(self.style.ERROR("도도부현: 특정 불가 (기본 배송비 적용)"))
        else:
            label = f"도도부현: {resolution.prefecture} ({resolution.strategy})"
            if resolution.low_confidence:
                self.stdout.write(self.style.NOTICE(f"{label} - 부분 일치"))
            else:
                self.stdout.write(label)

        if weight > 0:
            self.stdout.write(f"중량 구간: {service.select_tier(weight).value}")

        cost = service.calculate(weight, destination)
        self.stdout.write(self.style.SUCCESS(f"배송비: {cost}엔"))
