"""Delivery aggregate (CQRS) — getting one order from the store to the buyer.

Created when the seller picks a delivery method, one per order.

State Machine:
    REQUESTED → ACCEPTED → PICKED_UP → DELIVERED_CONFIRMED
    ACCEPTED → DELIVERED_CONFIRMED   (no separate handoff step)

Marketplace deliveries start REQUESTED with no courier and move to ACCEPTED
only through the conditional update in ``acceptance``, never through this
class, so that two couriers cannot both take the same job. Contracted and
seller deliveries start ACCEPTED.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.delivery.events import (
    DeliveryAssigned,
    DeliveryConfirmed,
    DeliveryPickedUp,
    DeliveryRequested,
)
from marketplace.domain import marketplace
from marketplace.order.order import DeliveryMethod


class DeliveryStatus(Enum):
    REQUESTED = "Requested"
    ACCEPTED = "Accepted"
    PICKED_UP = "PickedUp"
    DELIVERED_CONFIRMED = "Delivered_Confirmed"


ACTIVE_STATUSES = (DeliveryStatus.ACCEPTED.value, DeliveryStatus.PICKED_UP.value)

_VALID_TRANSITIONS = {
    DeliveryStatus.REQUESTED: {DeliveryStatus.ACCEPTED},
    DeliveryStatus.ACCEPTED: {DeliveryStatus.PICKED_UP, DeliveryStatus.DELIVERED_CONFIRMED},
    DeliveryStatus.PICKED_UP: {DeliveryStatus.DELIVERED_CONFIRMED},
    DeliveryStatus.DELIVERED_CONFIRMED: set(),  # terminal
}


@marketplace.aggregate
class Delivery:
    order_id = Identifier(required=True)
    courier_id = Identifier()
    status = String(
        choices=DeliveryStatus,
        default=DeliveryStatus.REQUESTED.value,
    )
    delivery_method = String(required=True, choices=DeliveryMethod)
    accepted_at = DateTime()
    packing_started_at = DateTime()
    picked_up_at = DateTime()
    delivered_at = DateTime()
    buyer_confirmed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory methods
    # -------------------------------------------------------------------
    @classmethod
    def request(cls, order_id):
        """Open a marketplace delivery to the courier pool."""
        now = datetime.now(UTC)
        delivery = cls(
            order_id=order_id,
            status=DeliveryStatus.REQUESTED.value,
            delivery_method=DeliveryMethod.MARKETPLACE.value,
            created_at=now,
            updated_at=now,
        )
        delivery.raise_(
            DeliveryRequested(
                delivery_id=str(delivery.id),
                order_id=str(order_id),
                requested_at=now,
            )
        )
        return delivery

    @classmethod
    def assign(cls, order_id, method: DeliveryMethod, courier_id=None):
        """Create a delivery that is already taken, by a contracted courier or the seller."""
        if method == DeliveryMethod.MARKETPLACE:
            raise ValidationError({"delivery_method": ["Marketplace deliveries are accepted by couriers"]})
        if method == DeliveryMethod.CONTRACTED and not courier_id:
            raise ValidationError({"courier_id": ["Contracted deliveries need a courier"]})

        now = datetime.now(UTC)
        delivery = cls(
            order_id=order_id,
            courier_id=courier_id if method == DeliveryMethod.CONTRACTED else None,
            status=DeliveryStatus.ACCEPTED.value,
            delivery_method=method.value,
            accepted_at=now,
            packing_started_at=now if method == DeliveryMethod.SELLER else None,
            created_at=now,
            updated_at=now,
        )
        delivery.raise_(
            DeliveryAssigned(
                delivery_id=str(delivery.id),
                order_id=str(order_id),
                delivery_method=method.value,
                courier_id=str(courier_id) if delivery.courier_id else None,
                assigned_at=now,
            )
        )
        return delivery

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: DeliveryStatus) -> None:
        current = DeliveryStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def is_held_by(self, courier_id) -> bool:
        return bool(self.courier_id) and str(self.courier_id) == str(courier_id)

    # -------------------------------------------------------------------
    # Handoff and confirmation
    # -------------------------------------------------------------------
    def mark_picked_up(self) -> None:
        """The courier collected the package from the seller."""
        if not self.courier_id:
            raise ValidationError({"courier_id": ["No courier has been assigned to this delivery"]})
        self._assert_can_transition(DeliveryStatus.PICKED_UP)

        now = datetime.now(UTC)
        self.status = DeliveryStatus.PICKED_UP.value
        self.picked_up_at = now
        self.packing_started_at = self.packing_started_at or now
        self.updated_at = now
        self.raise_(
            DeliveryPickedUp(
                delivery_id=str(self.id),
                order_id=str(self.order_id),
                courier_id=str(self.courier_id),
                picked_up_at=now,
            )
        )

    def confirm_delivered(self, confirmed_by) -> None:
        self._assert_can_transition(DeliveryStatus.DELIVERED_CONFIRMED)

        now = datetime.now(UTC)
        self.status = DeliveryStatus.DELIVERED_CONFIRMED.value
        self.delivered_at = now
        self.buyer_confirmed_at = now
        self.updated_at = now
        self.raise_(
            DeliveryConfirmed(
                delivery_id=str(self.id),
                order_id=str(self.order_id),
                delivery_method=self.delivery_method,
                courier_id=str(self.courier_id) if self.courier_id else None,
                confirmed_by=str(confirmed_by),
                delivered_at=now,
            )
        )


def delivery_for_order(order_id) -> Delivery:
    delivery = current_domain.repository_for(Delivery)._dao.query.filter(order_id=str(order_id)).all().first
    if delivery is None:
        raise ObjectNotFoundError({"order_id": [f"No delivery exists for order {order_id}"]})
    return delivery
