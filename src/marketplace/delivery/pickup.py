"""Pickup confirmation — the seller hands the package to the courier.

The courier shows the pickup code they received on acceptance; the seller
enters it here. A wrong code changes nothing.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.delivery.delivery import Delivery, delivery_for_order
from marketplace.domain import marketplace
from marketplace.errors import ConflictError, PermissionDeniedError
from marketplace.order.order import Order, OrderStatus


@marketplace.command(part_of="Delivery")
class ConfirmPickup:
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    pickup_code = String(required=True, max_length=20)


@marketplace.command_handler(part_of=Delivery)
class PickupHandler:
    @handle(ConfirmPickup)
    def confirm_pickup(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        store = current_domain.repository_for(Store).get(order.store_id)
        if not store.is_owned_by(command.seller_id):
            raise PermissionDeniedError({"order_id": ["This order does not belong to your store"]})
        if order.status != OrderStatus.DELIVERING.value:
            raise ValidationError({"status": ["Only orders out for delivery can be picked up"]})

        delivery = delivery_for_order(order.id)
        if not delivery.courier_id:
            raise ValidationError({"courier_id": ["No courier has accepted this delivery yet"]})
        if not order.matches_pickup_code(command.pickup_code):
            raise ConflictError({"pickup_code": ["Invalid pickup code"]})

        delivery.mark_picked_up()
        current_domain.repository_for(Delivery).add(delivery)
        return {"status": delivery.status}
