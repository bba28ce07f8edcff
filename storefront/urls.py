from django.urls import path

from storefront.views.shipping_views import ShippingCalculateView, ShippingRatesView

urlpatterns = [
    # 배송비
    path("shipping/calculate/", ShippingCalculateView.as_view(), name="shipping-calculate"),
    path("shipping/rates/", ShippingRatesView.as_view(), name="shipping-rates"),
]
