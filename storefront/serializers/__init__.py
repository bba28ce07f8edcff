"""
storefront/serializers/__init__.py

Serializer 모듈의 진입점입니다.

사용 예시:
    from storefront.serializers import ShippingCalculateSerializer
"""

# Shipping 관련 Serializers
from .shipping_serializers import ShippingCalculateSerializer

__all__ = [
    "ShippingCalculateSerializer",
]
