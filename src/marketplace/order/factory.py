"""Order creation.

``create_order`` is called from inside a command handler, so it shares the
handler's unit of work: if any line fails validation or stock reservation,
nothing written so far (order, items, earlier reservations) survives.
"""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.catalog.product import Product, normalize_city_id
from marketplace.inventory.ledger import reserve
from marketplace.order.codes import issue_codes
from marketplace.order.order import DeliveryAddress, Order, OrderStatus
from marketplace.pricing.engine import parse_cart_line
from marketplace.utils.money import as_float, to_money

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    delivery_code: str
    pickup_code: str

    @property
    def order_id(self) -> str:
        return str(self.order.id)


def build_address(address) -> DeliveryAddress | None:
    """Snapshot the buyer's address as a value object."""
    if address is None or isinstance(address, DeliveryAddress):
        return address
    if not isinstance(address, dict):
        raise ValidationError({"address": ["Address must be an object"]})
    return DeliveryAddress(
        city_id=normalize_city_id(address.get("city_id")),
        district_id=normalize_city_id(address.get("district_id")),
        street=address.get("street"),
        number=address.get("number"),
        landmark=address.get("landmark"),
        contact_phone=address.get("contact_phone"),
    )


def create_order(
    buyer_id,
    store_id,
    total_amount,
    initial_status: OrderStatus,
    payment_reference: str,
    items,
    address=None,
) -> PlacedOrder:
    lines = [parse_cart_line(raw) for raw in items or []]
    if not lines:
        raise ValidationError({"items": ["An order needs at least one item"]})

    product_ids = list(dict.fromkeys(line.product_id for line in lines))
    products = {
        str(product.id): product
        for product in current_domain.repository_for(Product)._dao.query.filter(id__in=product_ids).all().items
    }

    items_data = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None or not product.is_active:
            raise ValidationError({"product_id": [f"Product {line.product_id} is not available"]})
        if str(product.store_id) != str(store_id):
            raise ValidationError({"product_id": [f"Product {line.product_id} is not sold by this store"]})

        reserve(line.product_id, line.quantity)
        items_data.append(
            {
                "product_id": line.product_id,
                "product_name": product.name,
                "unit_price": as_float(to_money(product.price)),
                "quantity": line.quantity,
                "selected_options": json.dumps(line.selected_options),
            }
        )

    delivery_code, pickup_code = issue_codes()
    order = Order.place(
        buyer_id=buyer_id,
        store_id=store_id,
        total_amount=as_float(to_money(total_amount)),
        status=initial_status,
        payment_reference=payment_reference,
        delivery_code=delivery_code,
        pickup_code=pickup_code,
        address=build_address(address),
        items_data=items_data,
    )
    current_domain.repository_for(Order).add(order)

    logger.info(
        "order_created",
        order_id=str(order.id),
        store_id=str(store_id),
        total_amount=order.total_amount,
        status=order.status,
    )
    return PlacedOrder(order=order, delivery_code=delivery_code, pickup_code=pickup_code)
