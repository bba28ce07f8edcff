from django.apps import AppConfig


class StorefrontConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "storefront"

    def ready(self):
        """
        앱이 준비되면 시스템 체크 등록

        배송비 요금표를 읽을 수 없으면 manage.py check / runserver 가
        에러로 중단되도록 합니다.
        """
        import storefront.checks  # noqa
