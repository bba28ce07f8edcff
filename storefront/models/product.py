from django.core.validators import MinValueValidator
from django.db import models


class Product(models.Model):
    """상품 기본 정보 (배송 중량 포함)"""

    class Category(models.TextChoices):
        ASPARAGUS = "アスパラ", "アスパラ"
        HONEY = "はちみつ", "はちみつ"

    class WeightUnit(models.TextChoices):
        KG = "kg", "kg"
        G = "g", "g"

    class Status(models.TextChoices):
        ON_SALE = "販売中", "販売中"
        SUSPENDED = "販売停止", "販売停止"
        SEASON_ENDED = "今季の販売は終了しました", "今季の販売は終了しました"

    # 기본 정보
    name = models.CharField(max_length=200, verbose_name="상품명", db_index=True)
    description = models.TextField(verbose_name="상품 설명")
    category = models.CharField(max_length=20, choices=Category.choices, verbose_name="카테고리")

    # 가격 정보 (엔, 소수점 없음)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=0,
        validators=[MinValueValidator(0)],
        verbose_name="판매가",
    )

    # 재고 관리
    stock = models.PositiveIntegerField(default=0, verbose_name="재고 수량")
    low_stock_threshold = models.PositiveIntegerField(default=10, verbose_name="재고 부족 기준")

    # 배송 정보
    weight = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        default=1,
        validators=[MinValueValidator(0)],
        verbose_name="중량",
        help_text="weight_unit 단위의 1개당 중량",
    )
    weight_unit = models.CharField(
        max_length=2,
        choices=WeightUnit.choices,
        default=WeightUnit.KG,
        verbose_name="중량 단위",
    )
    shipping_estimate = models.CharField(
        max_length=100,
        default="ご注文から3〜5日以内に発送",
        verbose_name="발송 예정 안내",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ON_SALE,
        verbose_name="판매 상태",
    )

    # 시간 정보
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "storefront"
        verbose_name = "상품"
        verbose_name_plural = "상품"
        ordering = ["-created_at"]  # 최신순 정렬

    def __str__(self):
        return self.name

    @property
    def is_low_stock(self):
        """재고 부족 여부"""
        return self.stock <= self.low_stock_threshold

    @property
    def is_purchasable(self):
        """구매 가능 여부 (판매중 상태)"""
        return self.status == self.Status.ON_SALE
