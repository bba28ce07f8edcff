"""복수 배송지 주문 작성 서비스

하나의 주문 안에서 배송지를 여러 개 두고, 배송지마다 주소와 상품 수량을 따로 관리합니다.
배송지별 중량/배송비와 주문 전체 합계(상품 수, 소계, 배송비 합계, 총액)를 한 곳에서 계산합니다.

주문 흐름:
    DRAFTING (배송지/수량 입력) → SENDER_INFO (주문자 정보) → PAYMENT (결제 수단)
    → CONFIRMATION (최종 확인) → SUBMITTED (완료, 종료 상태)

배송비 재계산:
    - 수량 변경, 배송지(prefecture_or_city) 입력 시 배송지별로 재계산을 요청합니다.
    - 배송지 ID 당 asyncio 작업은 하나만 실행되고(single-flight), 실행 중 들어온 요청은
      현재 작업이 끝난 뒤 이어서 처리합니다.
    - 배송지별 세대 번호(generation)로 늦게 도착한 이전 응답은 버립니다. (마지막 요청 우선)
    - compute_totals() 는 재계산을 기다리지 않고 현재 캐시된 배송비로 바로 계산합니다.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from .base import ServiceError
from .catalog_service import CatalogProduct
from .shipping_service import FALLBACK_SHIPPING_COST
from .weight_service import WeightAggregator

logger = logging.getLogger(__name__)

# (총 중량 kg, 배송지 문자열) -> 배송비
ShippingQuoter = Callable[[Decimal, str], Awaitable[int]]
# 주문 payload -> 저장된 주문
OrderSubmitter = Callable[[dict], Awaitable[Any]]
# 우편번호 -> PostalAddress 또는 None
PostalCodeLookup = Callable[[str], Awaitable[Any]]


# ===== 상태 / 선택지 =====


class OrderStep(enum.IntEnum):
    """주문 작성 단계 (순서대로만 이동)"""

    DRAFTING = 1
    SENDER_INFO = 2
    PAYMENT = 3
    CONFIRMATION = 4
    SUBMITTED = 5


class PaymentMethod:
    """결제 수단"""

    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"

    CHOICES = [
        (CREDIT_CARD, "クレジットカード"),
        (BANK_TRANSFER, "銀行振込"),
        (CASH_ON_DELIVERY, "代金引換"),
    ]

    VALUES = frozenset(value for value, _ in CHOICES)


# ===== 예외 =====


class OrderComposerError(ServiceError):
    """주문 작성 관련 에러"""

    default_code = "ORDER_COMPOSER_ERROR"


class CannotRemovePrimaryDestination(OrderComposerError):
    default_code = "CANNOT_REMOVE_PRIMARY_DESTINATION"


class IncompleteDestinationAddress(OrderComposerError):
    default_code = "INCOMPLETE_DESTINATION_ADDRESS"

    def __init__(self, destination_id: int, missing_fields: Iterable[str] = ()):
        self.destination_id = destination_id
        super().__init__(
            f"配送先 #{destination_id} の住所情報を入力してください。",
            details={"destination_id": destination_id, "missing_fields": list(missing_fields)},
        )


class EmptyOrder(OrderComposerError):
    default_code = "EMPTY_ORDER"


class IncompleteSenderInfo(OrderComposerError):
    default_code = "INCOMPLETE_SENDER_INFO"


class InvalidPaymentMethod(OrderComposerError):
    default_code = "INVALID_PAYMENT_METHOD"


class OrderDraftLocked(OrderComposerError):
    default_code = "ORDER_DRAFT_LOCKED"


class UnknownDestination(OrderComposerError):
    default_code = "UNKNOWN_DESTINATION"


class InvalidQuantity(OrderComposerError):
    default_code = "INVALID_QUANTITY"


class InvalidStepTransition(OrderComposerError):
    default_code = "INVALID_STEP_TRANSITION"


# ===== 데이터 =====


@dataclass
class Address:
    """배송지/주문자 주소"""

    name: str = ""
    phone: str = ""
    postal_code: str = ""
    prefecture_or_city: str = ""
    street_address: str = ""

    def missing_fields(self) -> list[str]:
        return [f.name for f in fields(self) if not str(getattr(self, f.name)).strip()]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def is_blank(self) -> bool:
        """모든 항목이 비어 있음 (한 글자라도 입력했으면 False)"""
        return not any(str(getattr(self, f.name)).strip() for f in fields(self))

    def to_payload(self) -> dict[str, str]:
        """주문 API 형식 (city = 도도부현/시, address = 나머지 주소)"""
        return {
            "name": self.name,
            "phone": self.phone,
            "address": self.street_address,
            "city": self.prefecture_or_city,
            "postalCode": self.postal_code,
        }


ADDRESS_FIELDS = tuple(f.name for f in fields(Address))


@dataclass
class Destination:
    """주문 안의 배송지 하나"""

    id: int
    address: Address = field(default_factory=Address)
    quantities: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DestinationSummary:
    """배송지별 집계"""

    destination_id: int
    total_items: int
    subtotal: Decimal
    total_weight: Decimal
    shipping_cost: int

    @property
    def has_products(self) -> bool:
        return self.total_items > 0


@dataclass(frozen=True)
class OrderTotals:
    """주문 전체 집계"""

    total_items: int
    subtotal: Decimal
    total_shipping: int
    grand_total: Decimal
    has_any_product: bool
    destinations: tuple[DestinationSummary, ...] = ()


# ===== 주문 작성 =====


class OrderComposer:
    """
    복수 배송지 주문 작성기

    사용법:
        composer = OrderComposer(ProductCatalog.get_all(), LocalShippingQuoter(get_shipping_service()))
        composer.set_quantity(1, product_id, 2)
        composer.set_address_field(1, "prefecture_or_city", "東京都")
        await composer.settle()
        totals = composer.compute_totals()

    Note:
        - 배송지 1번은 삭제할 수 없으며, 새 배송지 ID는 2부터 증가하고 재사용하지 않습니다.
        - 배송지/수량 편집은 DRAFTING 단계에서만 가능합니다.
        - 이벤트 루프가 없을 때 요청된 재계산은 settle() 에서 시작됩니다.
    """

    PRIMARY_DESTINATION_ID = 1

    def __init__(
        self,
        catalog: Iterable[CatalogProduct],
        quoter: ShippingQuoter,
        fallback_cost: int = FALLBACK_SHIPPING_COST,
    ):
        self.catalog: dict[str, CatalogProduct] = {str(product.id): product for product in catalog}
        self.quoter = quoter
        self.fallback_cost = fallback_cost

        self.destinations: list[Destination] = [Destination(id=self.PRIMARY_DESTINATION_ID)]
        self.sender_info = Address()
        self.payment_method = PaymentMethod.CREDIT_CARD
        self.step = OrderStep.DRAFTING

        self._next_destination_id = self.PRIMARY_DESTINATION_ID + 1
        self._shipping_costs: dict[int, int] = {}
        self._generations: dict[int, int] = {}
        self._requested: set[int] = set()
        self._tasks: dict[int, asyncio.Task] = {}

    # ----- 배송지 편집 -----

    def get_destination(self, destination_id: int) -> Destination:
        for destination in self.destinations:
            if destination.id == destination_id:
                return destination
        raise UnknownDestination(
            f"配送先 #{destination_id} が見つかりません。",
            details={"destination_id": destination_id},
        )

    def add_destination(self) -> Destination:
        """빈 배송지 추가 (다른 배송지의 집계에는 영향 없음)"""
        self._ensure_drafting()
        destination = Destination(id=self._next_destination_id)
        self._next_destination_id += 1
        self.destinations.append(destination)
        logger.debug("배송지 추가: destination_id=%s", destination.id)
        return destination

    def remove_destination(self, destination_id: int) -> None:
        """
        배송지 삭제

        Raises:
            CannotRemovePrimaryDestination: 배송지 1번 (상태는 그대로 유지)
            UnknownDestination: 없는 배송지
        """
        if destination_id == self.PRIMARY_DESTINATION_ID:
            raise CannotRemovePrimaryDestination("最初の配送先は削除できません。")
        self._ensure_drafting()
        destination = self.get_destination(destination_id)

        self.destinations.remove(destination)
        self._shipping_costs.pop(destination_id, None)
        self._requested.discard(destination_id)
        # 실행 중인 재계산의 응답은 세대 번호 불일치로 버려진다
        self._generations[destination_id] = self._generations.get(destination_id, 0) + 1
        logger.debug("배송지 삭제: destination_id=%s", destination_id)

    @staticmethod
    def clamp_quantity(quantity: int, stock: int) -> int:
        """화면 입력값을 [0, 재고] 범위로 보정"""
        return max(0, min(int(quantity), max(0, int(stock))))

    def set_quantity(self, destination_id: int, product_id: Any, quantity: int) -> None:
        """
        배송지별 상품 수량 변경 후 배송비 재계산 요청

        재고 기준 보정은 호출자 책임입니다. (clamp_quantity 사용)

        Raises:
            InvalidQuantity: 정수가 아니거나 음수인 수량
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidQuantity(
                "数量は0以上の整数で指定してください。",
                details={"quantity": quantity},
            )
        self._ensure_drafting()
        destination = self.get_destination(destination_id)
        destination.quantities[str(product_id)] = quantity
        self.request_recompute(destination_id)

    def set_address_field(self, destination_id: int, field_name: str, value: str) -> None:
        """
        배송지 주소 항목 변경

        prefecture_or_city 에 값이 들어온 경우에만 배송비를 재계산합니다.
        (이름/전화번호/우편번호 변경은 배송비와 무관)
        """
        if field_name not in ADDRESS_FIELDS:
            raise ValueError(f"unknown address field: {field_name}")
        self._ensure_drafting()
        destination = self.get_destination(destination_id)
        value = value or ""
        setattr(destination.address, field_name, value)

        if field_name == "prefecture_or_city" and value.strip():
            self.request_recompute(destination_id)

    def prefill_primary_address(self, address: Mapping[str, Any]) -> bool:
        """
        저장된 회원 주소로 배송지 1번 채우기

        배송지 1번에 어느 항목이든 입력되어 있으면 아무것도 하지 않습니다. (직접 입력한 값 유지)

        Args:
            address: {"name", "phone", "postalCode", "city", "address"}

        Returns:
            채웠으면 True
        """
        destination = self.get_destination(self.PRIMARY_DESTINATION_ID)
        if self.step != OrderStep.DRAFTING or not destination.address.is_blank():
            return False

        values = {
            "name": address.get("name") or "",
            "phone": address.get("phone") or "",
            "postal_code": address.get("postalCode") or "",
            "prefecture_or_city": address.get("city") or "",
            "street_address": address.get("address") or "",
        }
        for field_name, value in values.items():
            self.set_address_field(destination.id, field_name, value)
        return True

    async def prefill_from_postal_code(
        self,
        destination_id: int,
        postal_code: str,
        lookup: PostalCodeLookup,
    ) -> bool:
        """
        우편번호 검색 결과로 배송지 주소 채우기

        검색 실패(형식 오류, 결과 없음, 통신 오류)는 수동 입력을 막지 않도록 False 만 반환합니다.
        """
        self._ensure_drafting()
        self.get_destination(destination_id)

        try:
            result = await lookup(postal_code)
        except Exception:
            logger.warning("우편번호 검색 실패: postal_code=%s", postal_code, exc_info=True)
            return False
        if result is None:
            return False

        # 검색 도중 배송지가 삭제되었거나 단계가 바뀐 경우
        if self.step != OrderStep.DRAFTING or destination_id not in {d.id for d in self.destinations}:
            return False

        self.set_address_field(destination_id, "postal_code", result.postal_code)
        self.set_address_field(destination_id, "street_address", result.street_address)
        self.set_address_field(destination_id, "prefecture_or_city", result.prefecture)
        return True

    # ----- 주문자 / 결제 -----

    def set_sender_field(self, field_name: str, value: str) -> None:
        if field_name not in ADDRESS_FIELDS:
            raise ValueError(f"unknown address field: {field_name}")
        self._ensure_not_submitted()
        setattr(self.sender_info, field_name, value or "")

    def select_payment_method(self, method: str) -> None:
        if method not in PaymentMethod.VALUES:
            raise InvalidPaymentMethod(
                "選択された支払い方法は利用できません。",
                details={"payment_method": method},
            )
        self._ensure_not_submitted()
        self.payment_method = method

    # ----- 단계 이동 -----

    def validate_destinations(self) -> None:
        """
        DRAFTING 단계 종료 전 검증

        Raises:
            IncompleteDestinationAddress: 상품이 있는 배송지의 주소 항목이 비어 있음
            EmptyOrder: 모든 배송지의 수량이 0
        """
        has_any_product = False
        for destination in self.destinations:
            if not self._positive_quantities(destination):
                continue
            has_any_product = True
            missing = destination.address.missing_fields()
            if missing:
                raise IncompleteDestinationAddress(destination.id, missing)

        if not has_any_product:
            raise EmptyOrder("商品が選択されていません。")

    def advance(self) -> OrderStep:
        """다음 단계로 이동 (각 단계의 입력 검증 포함)"""
        if self.step == OrderStep.DRAFTING:
            self.validate_destinations()
        elif self.step == OrderStep.SENDER_INFO:
            missing = self.sender_info.missing_fields()
            if missing:
                raise IncompleteSenderInfo(
                    "ご注文者様の情報を入力してください。",
                    details={"missing_fields": missing},
                )
        elif self.step == OrderStep.CONFIRMATION:
            raise InvalidStepTransition("注文の確定は submit() で行ってください。")
        elif self.step == OrderStep.SUBMITTED:
            raise InvalidStepTransition("この注文はすでに確定しています。")

        self.step = OrderStep(self.step + 1)
        logger.debug("주문 단계 이동: step=%s", self.step.name)
        return self.step

    def go_back(self) -> OrderStep:
        """이전 단계로 이동 (SENDER_INFO, PAYMENT, CONFIRMATION 에서만 가능)"""
        if self.step in (OrderStep.DRAFTING, OrderStep.SUBMITTED):
            raise InvalidStepTransition(
                "前の手順に戻ることはできません。",
                details={"step": self.step.name},
            )
        self.step = OrderStep(self.step - 1)
        return self.step

    # ----- 집계 -----

    def compute_totals(self) -> OrderTotals:
        """
        주문 합계 계산 (동기, 부작용 없음)

        배송비는 캐시된 값을 사용하고, 상품은 있지만 아직 계산되지 않은 배송지는
        기본 배송비를 사용합니다. 상품이 없는 배송지의 배송비는 0 입니다.
        """
        summaries = []
        for destination in self.destinations:
            quantities = self._positive_quantities(destination)
            total_items = sum(quantities.values())
            subtotal = sum(
                (self.catalog[product_id].price * quantity for product_id, quantity in quantities.items()),
                Decimal("0"),
            )
            shipping_cost = self._shipping_costs.get(destination.id, self.fallback_cost) if total_items else 0
            summaries.append(
                DestinationSummary(
                    destination_id=destination.id,
                    total_items=total_items,
                    subtotal=subtotal,
                    total_weight=WeightAggregator.total_weight(self.catalog.values(), quantities),
                    shipping_cost=shipping_cost,
                )
            )

        total_items = sum(summary.total_items for summary in summaries)
        subtotal = sum((summary.subtotal for summary in summaries), Decimal("0"))
        total_shipping = sum(summary.shipping_cost for summary in summaries)
        return OrderTotals(
            total_items=total_items,
            subtotal=subtotal,
            total_shipping=total_shipping,
            grand_total=subtotal + total_shipping,
            has_any_product=total_items > 0,
            destinations=tuple(summaries),
        )

    def shipping_cost_for(self, destination_id: int) -> Optional[int]:
        """캐시된 배송비 (아직 계산 전이면 None)"""
        return self._shipping_costs.get(destination_id)

    # ----- 주문 전송 -----

    def build_submission(self) -> dict[str, Any]:
        """주문 API 로 보낼 payload (수량이 있는 상품만 배송지 주소와 함께 평탄화)"""
        items = []
        for destination in self.destinations:
            shipping_address = destination.address.to_payload()
            for product_id, quantity in self._positive_quantities(destination).items():
                items.append(
                    {
                        "product": self.catalog[product_id].id,
                        "quantity": quantity,
                        "shippingAddress": dict(shipping_address),
                    }
                )
        return {
            "items": items,
            "paymentMethod": self.payment_method,
            "senderInfo": self.sender_info.to_payload(),
        }

    async def submit(self, submitter: OrderSubmitter) -> Any:
        """
        주문 확정 (CONFIRMATION 단계에서만)

        전송에 실패하면 예외를 그대로 전달하고 단계는 CONFIRMATION 으로 유지됩니다.
        """
        if self.step != OrderStep.CONFIRMATION:
            raise InvalidStepTransition(
                "注文内容の確認後に確定してください。",
                details={"step": self.step.name},
            )
        order = await submitter(self.build_submission())
        self.step = OrderStep.SUBMITTED
        logger.info("주문 확정 완료: destinations=%d", len(self.destinations))
        return order

    # ----- 배송비 재계산 -----

    def request_recompute(self, destination_id: int) -> None:
        """배송지 배송비 재계산 요청 (실행 중인 루프가 없으면 settle() 까지 대기)"""
        self._generations[destination_id] = self._generations.get(destination_id, 0) + 1
        self._requested.add(destination_id)
        self._start_worker(destination_id)

    async def settle(self) -> None:
        """대기 중인 요청을 시작하고, 모든 재계산이 끝날 때까지 기다림"""
        for destination_id in list(self._requested):
            self._start_worker(destination_id)
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()))

    def _start_worker(self, destination_id: int) -> None:
        if destination_id in self._tasks:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._tasks[destination_id] = loop.create_task(self._recompute_worker(destination_id))

    async def _recompute_worker(self, destination_id: int) -> None:
        try:
            while destination_id in self._requested:
                self._requested.discard(destination_id)
                await self._recompute(destination_id)
        finally:
            self._tasks.pop(destination_id, None)

    async def _recompute(self, destination_id: int) -> None:
        destination = next((d for d in self.destinations if d.id == destination_id), None)
        if destination is None:
            return

        generation = self._generations.get(destination_id, 0)
        weight = WeightAggregator.total_weight(self.catalog.values(), destination.quantities)
        text = destination.address.prefecture_or_city.strip()
        if weight <= 0 or not text:
            self._shipping_costs.pop(destination_id, None)
            return

        cost = await self._quote(weight, text)

        if self._generations.get(destination_id) != generation:
            logger.debug("이전 배송비 응답 폐기: destination_id=%s, generation=%s", destination_id, generation)
            return
        if destination not in self.destinations:
            return
        self._shipping_costs[destination_id] = cost

    async def _quote(self, weight: Decimal, destination: str) -> int:
        """배송비 조회 (실패, 잘못된 응답은 기본 배송비)"""
        try:
            cost = await self.quoter(weight, destination)
        except Exception:
            logger.warning(
                "배송비 조회 실패, 기본 배송비 적용: weight=%s, destination=%s",
                weight,
                destination,
                exc_info=True,
            )
            return self.fallback_cost

        if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
            logger.warning("잘못된 배송비 응답, 기본 배송비 적용: value=%r", cost)
            return self.fallback_cost
        return cost

    # ----- 내부 -----

    def _positive_quantities(self, destination: Destination) -> dict[str, int]:
        """카탈로그에 있는 상품 중 수량이 1 이상인 것"""
        return {
            product_id: quantity
            for product_id, quantity in destination.quantities.items()
            if quantity > 0 and product_id in self.catalog
        }

    def _ensure_drafting(self) -> None:
        if self.step != OrderStep.DRAFTING:
            raise OrderDraftLocked(
                "配送先と数量は注文内容の入力中のみ変更できます。",
                details={"step": self.step.name},
            )

    def _ensure_not_submitted(self) -> None:
        if self.step == OrderStep.SUBMITTED:
            raise OrderDraftLocked("この注文はすでに確定しています。")
