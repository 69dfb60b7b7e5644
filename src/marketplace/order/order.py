"""Order aggregate (CQRS) — one purchase from one buyer to one store.

The total is fixed when the order is placed: item prices are snapshots and
the shipping cost is the one quoted by pricing at checkout. Nothing on the
order is recomputed from current catalog prices afterwards.

State Machine:
    PENDING_PAYMENT → PROCESSING → DELIVERING → COMPLETED

Simulated purchases start directly in PROCESSING.
"""

import json
import secrets
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import ConflictError
from marketplace.order.events import (
    DeliveryMethodChosen,
    OrderCompleted,
    OrderPlaced,
    PaymentConfirmed,
    PaymentReferenceRecorded,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING_PAYMENT = "Pending_Payment"
    PROCESSING = "Processing"
    DELIVERING = "Delivering"
    COMPLETED = "Completed"


class DeliveryMethod(Enum):
    MARKETPLACE = "Marketplace"
    CONTRACTED = "Contracted"
    SELLER = "Seller"


PENDING_REFERENCE = "pending"
SIMULATED_REFERENCE = "simulated"

_VALID_TRANSITIONS = {
    OrderStatus.PENDING_PAYMENT: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.DELIVERING},
    OrderStatus.DELIVERING: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class DeliveryAddress:
    """The buyer's address as it was when the order was placed.

    Later changes to the buyer's saved address never reach existing orders.
    """

    city_id = Integer()
    district_id = Integer()
    street = String(max_length=255)
    number = String(max_length=50)
    landmark = String(max_length=255)
    contact_phone = String(max_length=50)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """A purchased product with the price it was sold at."""

    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    selected_options = Text()  # JSON object, stored as received

    @property
    def options(self) -> dict:
        return json.loads(self.selected_options) if self.selected_options else {}


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    buyer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    total_amount = Float(required=True, min_value=0.0)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING_PAYMENT.value,
    )
    delivery_method = String(choices=DeliveryMethod)
    payment_reference = String(max_length=255, default=PENDING_REFERENCE)
    delivery_code = String(required=True, max_length=20)
    pickup_code = String(required=True, max_length=20)
    address = ValueObject(DeliveryAddress)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    completed_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        buyer_id,
        store_id,
        total_amount: float,
        status: OrderStatus,
        payment_reference: str,
        delivery_code: str,
        pickup_code: str,
        address: DeliveryAddress | None,
        items_data: list[dict],
    ):
        if status not in (OrderStatus.PENDING_PAYMENT, OrderStatus.PROCESSING):
            raise ValidationError({"status": [f"Orders cannot be placed as {status.value}"]})
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            buyer_id=buyer_id,
            store_id=store_id,
            total_amount=total_amount,
            status=status.value,
            payment_reference=payment_reference,
            delivery_code=delivery_code,
            pickup_code=pickup_code,
            address=address,
            created_at=now,
            updated_at=now,
            paid_at=now if status == OrderStatus.PROCESSING else None,
        )
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                store_id=str(store_id),
                total_amount=total_amount,
                status=status.value,
                item_count=len(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    # -------------------------------------------------------------------
    # Codes
    # -------------------------------------------------------------------
    def matches_delivery_code(self, code) -> bool:
        return _codes_match(self.delivery_code, code)

    def matches_pickup_code(self, code) -> bool:
        return _codes_match(self.pickup_code, code)

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment_reference(self, reference: str) -> None:
        """Replace the placeholder reference with the provider's one."""
        if OrderStatus(self.status) != OrderStatus.PENDING_PAYMENT:
            raise ValidationError({"status": ["Payment reference can only change while payment is pending"]})
        if not reference:
            raise ValidationError({"payment_reference": ["Payment reference is required"]})

        now = datetime.now(UTC)
        self.payment_reference = reference
        self.updated_at = now
        self.raise_(
            PaymentReferenceRecorded(
                order_id=str(self.id),
                payment_reference=reference,
                recorded_at=now,
            )
        )

    def confirm_payment(self, reference: str) -> None:
        self._assert_can_transition(OrderStatus.PROCESSING)
        if reference != self.payment_reference:
            raise ConflictError({"payment_reference": ["Payment reference does not match this order"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.paid_at = now
        self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_reference=reference,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def start_delivery(self, method: DeliveryMethod) -> None:
        self._assert_can_transition(OrderStatus.DELIVERING)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERING.value
        self.delivery_method = method.value
        self.updated_at = now
        self.raise_(
            DeliveryMethodChosen(
                order_id=str(self.id),
                store_id=str(self.store_id),
                delivery_method=method.value,
                chosen_at=now,
            )
        )

    def complete(self, marketplace_fee: float, seller_earnings: float) -> None:
        self._assert_can_transition(OrderStatus.COMPLETED)

        now = datetime.now(UTC)
        self.status = OrderStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now
        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                store_id=str(self.store_id),
                total_amount=self.total_amount,
                marketplace_fee=marketplace_fee,
                seller_earnings=seller_earnings,
                completed_at=now,
            )
        )


def _codes_match(expected, given) -> bool:
    if not expected or not given:
        return False
    return secrets.compare_digest(
        str(expected).upper().encode("utf-8"),
        str(given).strip().upper().encode("utf-8"),
    )
