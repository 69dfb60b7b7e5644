"""Delivery confirmation — the buyer's code closes the order.

The assigned courier (or the seller, for seller deliveries) enters the code
the buyer gives them. In one unit of work the seller is credited, the order
is completed, the delivery is closed and the courier becomes available
again. A second confirmation finds no order out for delivery and is
rejected, so the seller is never credited twice.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.courier.courier import release_courier
from marketplace.delivery.delivery import Delivery, delivery_for_order
from marketplace.domain import marketplace
from marketplace.errors import PermissionDeniedError
from marketplace.order.order import DeliveryMethod, Order, OrderStatus
from marketplace.settlement.settlement import settle
from marketplace.utils.money import as_float

logger = structlog.get_logger(__name__)

_COURIER_METHODS = (DeliveryMethod.MARKETPLACE.value, DeliveryMethod.CONTRACTED.value)


@marketplace.command(part_of="Delivery")
class ConfirmDelivery:
    order_id = Identifier(required=True)
    delivery_code = String(required=True, max_length=20)
    confirmed_by = Identifier(required=True)


@marketplace.command_handler(part_of=Delivery)
class ConfirmationHandler:
    @handle(ConfirmDelivery)
    def confirm_delivery(self, command):
        order_repo = current_domain.repository_for(Order)
        order = (
            order_repo._dao.query.filter(
                id=str(command.order_id),
                status=OrderStatus.DELIVERING.value,
            )
            .all()
            .first
        )
        if order is None or not order.matches_delivery_code(command.delivery_code):
            raise ObjectNotFoundError({"order_id": ["Invalid code or order"]})
        order = order_repo.get(order.id)

        delivery = delivery_for_order(order.id)
        is_courier = delivery.is_held_by(command.confirmed_by)
        is_self_delivering_seller = (
            delivery.delivery_method == DeliveryMethod.SELLER.value
            and current_domain.repository_for(Store).get(order.store_id).is_owned_by(command.confirmed_by)
        )
        if not (is_courier or is_self_delivering_seller):
            raise PermissionDeniedError(
                {"confirmed_by": ["Only the assigned courier or the delivering seller can confirm"]}
            )

        settlement = settle(order)
        order.complete(
            marketplace_fee=as_float(settlement.marketplace_fee),
            seller_earnings=as_float(settlement.seller_earnings),
        )
        delivery.confirm_delivered(confirmed_by=command.confirmed_by)

        if delivery.delivery_method in _COURIER_METHODS and delivery.courier_id:
            if not release_courier(delivery.courier_id):
                logger.warning(
                    "courier_already_available",
                    order_id=str(order.id),
                    courier_id=str(delivery.courier_id),
                )

        order_repo.add(order)
        current_domain.repository_for(Delivery).add(delivery)

        logger.info(
            "delivery_confirmed",
            order_id=str(order.id),
            delivery_method=delivery.delivery_method,
            seller_earnings=as_float(settlement.seller_earnings),
        )
        return {
            "order_id": str(order.id),
            "marketplace_fee": as_float(settlement.marketplace_fee),
            "seller_earnings": as_float(settlement.seller_earnings),
        }
