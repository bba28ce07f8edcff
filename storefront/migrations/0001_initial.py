import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(db_index=True, max_length=200, verbose_name="상품명")),
                ("description", models.TextField(verbose_name="상품 설명")),
                (
                    "category",
                    models.CharField(
                        choices=[("アスパラ", "アスパラ"), ("はちみつ", "はちみつ")],
                        max_length=20,
                        verbose_name="카테고리",
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=0,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="판매가",
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0, verbose_name="재고 수량")),
                ("low_stock_threshold", models.PositiveIntegerField(default=10, verbose_name="재고 부족 기준")),
                (
                    "weight",
                    models.DecimalField(
                        decimal_places=3,
                        default=1,
                        help_text="weight_unit 단위의 1개당 중량",
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="중량",
                    ),
                ),
                (
                    "weight_unit",
                    models.CharField(
                        choices=[("kg", "kg"), ("g", "g")],
                        default="kg",
                        max_length=2,
                        verbose_name="중량 단위",
                    ),
                ),
                (
                    "shipping_estimate",
                    models.CharField(
                        default="ご注文から3〜5日以内に発送",
                        max_length=100,
                        verbose_name="발송 예정 안내",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("販売中", "販売中"),
                            ("販売停止", "販売停止"),
                            ("今季の販売は終了しました", "今季の販売は終了しました"),
                        ],
                        default="販売中",
                        max_length=20,
                        verbose_name="판매 상태",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "상품",
                "verbose_name_plural": "상품",
                "ordering": ["-created_at"],
            },
        ),
    ]
