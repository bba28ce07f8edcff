from django.contrib import admin

from .models import Product


# Product Admin
@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    상품 관리
    - 재고, 가격, 배송 중량 한눈에 확인
    """

    list_display = [
        "name",
        "category",
        "formatted_price",
        "stock",
        "low_stock_alert",
        "formatted_weight",
        "status",
        "created_at",
    ]

    list_filter = ["category", "status", "weight_unit", "created_at"]
    search_fields = ["name", "description"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    readonly_fields = ["created_at", "updated_at"]

    # 상세 페이지 필드 구성
    fieldsets = (
        ("기본 정보", {"fields": ("name", "category", "description", "status")}),
        ("가격 및 재고", {"fields": ("price", "stock", "low_stock_threshold")}),
        ("배송 정보", {"fields": ("weight", "weight_unit", "shipping_estimate")}),
        (
            "시간 정보",
            {"fields": ("created_at", "updated_at"), "classes": ("collapse",)},
        ),
    )

    @admin.display(description="가격", ordering="price")
    def formatted_price(self, obj):
        """가격을 엔화 형식으로 표시"""
        return f"¥{obj.price:,.0f}"

    @admin.display(description="재고 부족", boolean=True)
    def low_stock_alert(self, obj):
        """재고가 low_stock_threshold 이하인 상품 표시 (재입고 확인용)"""
        return obj.is_low_stock

    @admin.display(description="중량", ordering="weight")
    def formatted_weight(self, obj):
        return f"{obj.weight.normalize():f}{obj.weight_unit}"
