import logging

from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import permissions, serializers as drf_serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers.shipping_serializers import ShippingCalculateSerializer
from ..services.catalog_service import ProductCatalog
from ..services.rate_table import DataSourceUnavailable
from ..services.shipping_service import get_shipping_service
from ..throttles import ShippingCalculateRateThrottle

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "商品情報と配送先都道府県が必要です。"
SERVER_ERROR_MESSAGE = "サーバーエラーが発生しました。"


# ===== Swagger 문서화용 응답 Serializers =====


class ShippingCalculateResponseSerializer(drf_serializers.Serializer):
    """배송비 계산 응답"""

    totalWeight = drf_serializers.FloatField(help_text="총 중량 (kg)")
    prefecture = drf_serializers.CharField(help_text="요청한 배송지")
    shippingCost = drf_serializers.IntegerField(help_text="배송비 (엔)")


class TierRatesResponseSerializer(drf_serializers.Serializer):
    tier2 = drf_serializers.IntegerField(help_text="2kgまでの料金")
    tier5 = drf_serializers.IntegerField(help_text="5kgまでの料金")
    tier10 = drf_serializers.IntegerField(help_text="10kgまでの料金")


class RateEntryResponseSerializer(drf_serializers.Serializer):
    """요금표 한 행"""

    region = drf_serializers.CharField(help_text="地域")
    prefecture = drf_serializers.CharField(help_text="都道府県名")
    rates = TierRatesResponseSerializer()


class ShippingErrorResponseSerializer(drf_serializers.Serializer):
    """배송비 API 에러 응답"""

    error = drf_serializers.CharField()
    errors = drf_serializers.DictField(required=False, help_text="필드별 검증 에러")


class ShippingCalculateView(APIView):
    """
    배송비 계산 API

    주문 화면에서 수량이나 배송지를 바꿀 때마다 호출합니다.
    배송지를 특정할 수 없어도 에러 대신 기본 배송비(500엔)를 반환합니다.
    """

    permission_classes = [permissions.AllowAny]
    throttle_classes = [ShippingCalculateRateThrottle]

    @extend_schema(
        request=ShippingCalculateSerializer,
        responses={
            200: ShippingCalculateResponseSerializer,
            400: ShippingErrorResponseSerializer,
            500: ShippingErrorResponseSerializer,
        },
        summary="배송비 계산",
        description="""
상품 목록의 총 중량과 배송지로 배송비를 계산합니다.

**중량 구간:** 2kg 이하 / 5kg 이하 / 그 이상 (10kg 구간 요금)

**weight 지정:** 항목에 `weight`(kg)가 있으면 상품 정보를 조회하지 않고 `weight * quantity` 를 사용합니다.

**기본 배송비:** 배송지를 특정할 수 없거나 요금표에 없으면 500엔
        """,
        examples=[
            OpenApiExample(
                "東京都 3.5kg",
                value={
                    "products": [{"productId": 1, "quantity": 2}, {"productId": 2, "quantity": 1}],
                    "prefecture": "東京都",
                },
                request_only=True,
            ),
        ],
        tags=["Shipping"],
    )
    def post(self, request):
        """배송비 계산"""
        serializer = ShippingCalculateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": INVALID_REQUEST_MESSAGE, "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            quote = get_shipping_service().quote_items(
                serializer.validated_data["products"],
                serializer.validated_data["prefecture"],
                ProductCatalog,
            )
        except Exception as e:
            logger.error("배송비 계산 실패 (Unexpected): error=%s", str(e), exc_info=True)
            return Response({"error": SERVER_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(quote.to_response(), status=status.HTTP_200_OK)


class ShippingRatesView(APIView):
    """
    배송비 요금표 조회 API

    메모리에 캐시된 요금표 전체를 CSV 순서대로 반환합니다.
    """

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        responses={
            200: RateEntryResponseSerializer(many=True),
            500: ShippingErrorResponseSerializer,
        },
        summary="배송비 요금표",
        tags=["Shipping"],
    )
    def get(self, request):
        try:
            entries = get_shipping_service().rate_table.entries()
        except DataSourceUnavailable as e:
            logger.error("배송비 요금표 조회 실패: code=%s, message=%s", e.code, e.message)
            return Response({"error": SERVER_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response([entry.to_dict() for entry in entries], status=status.HTTP_200_OK)
