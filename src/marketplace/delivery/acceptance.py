"""Delivery acceptance — a courier taking an open marketplace job.

Two conditional writes decide the outcome, both inside one unit of work:

1. The courier goes from Available to Assigned. A courier already holding a
   delivery is refused.
2. The delivery goes from Requested (no courier) to Accepted by this
   courier. Zero rows means another courier got it first; raising here
   also undoes step 1.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.courier.courier import Courier, claim_courier
from marketplace.delivery.delivery import Delivery, DeliveryStatus
from marketplace.domain import marketplace
from marketplace.errors import ConflictError, DeliveryUnavailableError, PermissionDeniedError
from marketplace.order.order import DeliveryMethod, Order
from marketplace.utils.conditional import compare_and_set

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Delivery")
class AcceptDelivery:
    order_id = Identifier(required=True)
    courier_id = Identifier(required=True)


def registered_courier(courier_id) -> Courier:
    try:
        return current_domain.repository_for(Courier).get(courier_id)
    except ObjectNotFoundError as exc:
        raise PermissionDeniedError({"courier_id": ["Only registered couriers can do this"]}) from exc


@marketplace.command_handler(part_of=Delivery)
class AcceptDeliveryHandler:
    @handle(AcceptDelivery)
    def accept_delivery(self, command):
        registered_courier(command.courier_id)

        if not claim_courier(command.courier_id):
            raise ConflictError({"courier_id": ["You already have a pending delivery"]})

        now = datetime.now(UTC)
        accepted = compare_and_set(
            Delivery,
            {
                "order_id": str(command.order_id),
                "status": DeliveryStatus.REQUESTED.value,
                "courier_id__isnull": True,
                "delivery_method": DeliveryMethod.MARKETPLACE.value,
            },
            courier_id=str(command.courier_id),
            status=DeliveryStatus.ACCEPTED.value,
            accepted_at=now,
            updated_at=now,
        )
        if not accepted:
            raise DeliveryUnavailableError({"order_id": ["This order is no longer available"]})

        order = current_domain.repository_for(Order).get(command.order_id)
        logger.info("delivery_accepted", order_id=str(order.id), courier_id=str(command.courier_id))
        return {"order_id": str(order.id), "pickup_code": order.pickup_code}
