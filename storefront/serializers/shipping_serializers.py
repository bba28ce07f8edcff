from collections.abc import Mapping

from rest_framework import serializers


class ShippingCalculateSerializer(serializers.Serializer):
    """
    배송비 계산 요청 시리얼라이저

    products 가 배열이 아니거나 prefecture 가 없으면 400 입니다.
    배열 안의 잘못된 항목(객체가 아님, 수량 누락 등)은 에러 없이 계산에서 제외합니다.
    """

    products = serializers.ListField(
        help_text='상품 목록 [{"productId": 1, "quantity": 2, "weight": 1.5(선택)}]',
    )
    prefecture = serializers.CharField(
        max_length=100,
        help_text="배송지 (도도부현명 또는 시/구 이름, 예: 東京都, 札幌市)",
    )

    def validate_products(self, value):
        return [item for item in value if isinstance(item, Mapping)]
