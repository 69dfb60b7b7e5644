"""Delivery method decision — command and handler.

The seller decides how a paid order reaches the buyer:

- ``Marketplace``: the delivery is opened to every available courier.
- ``Contracted``: the store's own courier takes it straight away.
- ``Seller``: the seller delivers it personally.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.courier.courier import claim_courier
from marketplace.delivery.delivery import Delivery
from marketplace.domain import marketplace
from marketplace.errors import ConflictError, PermissionDeniedError
from marketplace.order.order import DeliveryMethod, Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Delivery")
class ChooseDeliveryMethod:
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    delivery_method = String(required=True, max_length=20)


def parse_delivery_method(value) -> DeliveryMethod:
    try:
        return DeliveryMethod(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in DeliveryMethod)
        raise ValidationError({"delivery_method": [f"Delivery method must be one of: {allowed}"]}) from exc


@marketplace.command_handler(part_of=Delivery)
class DeliveryDecisionHandler:
    @handle(ChooseDeliveryMethod)
    def choose_delivery_method(self, command):
        method = parse_delivery_method(command.delivery_method)

        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        store = current_domain.repository_for(Store).get(order.store_id)
        if not store.is_owned_by(command.seller_id):
            raise PermissionDeniedError({"order_id": ["This order does not belong to your store"]})

        order.start_delivery(method)

        if method == DeliveryMethod.MARKETPLACE:
            delivery = Delivery.request(order.id)
        elif method == DeliveryMethod.CONTRACTED:
            courier_id = store.contracted_courier_id
            if not courier_id:
                raise ValidationError({"delivery_method": ["This store has no contracted courier"]})
            if not claim_courier(courier_id):
                raise ConflictError({"courier_id": ["Your contracted courier is busy with another delivery"]})
            delivery = Delivery.assign(order.id, method, courier_id=courier_id)
        else:
            delivery = Delivery.assign(order.id, method)

        order_repo.add(order)
        current_domain.repository_for(Delivery).add(delivery)

        logger.info(
            "delivery_method_chosen",
            order_id=str(order.id),
            delivery_method=method.value,
            courier_id=str(delivery.courier_id) if delivery.courier_id else None,
        )
        return {"delivery_id": str(delivery.id), "status": delivery.status}
