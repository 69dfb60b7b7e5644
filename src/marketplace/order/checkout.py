"""Checkout — turning a cart into an order.

``PlaceOrder`` creates the order awaiting payment and asks the payment
provider for a checkout preference. ``SimulatePurchase`` skips the provider
and creates the order as already paid. Both price the cart with the same
engine as the cart preview and accept carts from a single store only.

Either handler failing (empty cart, stock, provider error) rolls back the
whole unit of work, stock reservations included.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.domain import marketplace
from marketplace.errors import UpstreamError
from marketplace.gateway import get_gateway
from marketplace.order.factory import create_order
from marketplace.order.order import PENDING_REFERENCE, SIMULATED_REFERENCE, Order, OrderStatus
from marketplace.pricing.engine import price_cart
from marketplace.settlement.settlement import split_total
from marketplace.utils.money import as_float

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    buyer_id = Identifier(required=True)
    buyer_email = String(max_length=255)
    items = Text(required=True)  # JSON list of cart lines
    address = Text()  # JSON object, the buyer's address snapshot


@marketplace.command(part_of="Order")
class SimulatePurchase:
    """Create an order as if payment had already gone through."""

    buyer_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of cart lines
    address = Text()  # JSON object, the buyer's address snapshot


def _load_json(raw, field_name: str, expected_type: type):
    if raw in (None, ""):
        return expected_type()
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({field_name: ["Malformed JSON"]}) from exc
    if not isinstance(value, expected_type):
        raise ValidationError({field_name: [f"Expected a JSON {expected_type.__name__}"]})
    return value


def _price_single_store(command):
    """Price the command's cart and require it to come from one store."""
    items = _load_json(command.items, "items", list)
    if not items:
        raise ValidationError({"items": ["Your cart is empty"]})
    address = _load_json(command.address, "address", dict)

    breakdown = price_cart(items, address.get("city_id"))
    if breakdown.is_empty:
        raise ValidationError({"items": ["None of the items in your cart are available"]})
    if breakdown.store_count > 1:
        raise ValidationError(
            {"items": ["Your cart has items from more than one store; create a separate order per store"]}
        )
    return items, address, breakdown.stores[0]


@marketplace.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items, address, priced = _price_single_store(command)

        store = current_domain.repository_for(Store).get(priced.store_id)
        if not store.payment_credential:
            raise UpstreamError({"payment": ["This seller has not connected a payment account yet"]})

        placed = create_order(
            buyer_id=command.buyer_id,
            store_id=priced.store_id,
            total_amount=priced.total_with_shipping,
            initial_status=OrderStatus.PENDING_PAYMENT,
            payment_reference=PENDING_REFERENCE,
            items=items,
            address=address,
        )

        split = split_total(priced.total_with_shipping)
        result = get_gateway().create_preference(
            order_id=placed.order_id,
            amount=as_float(split.total_amount),
            fee_amount=as_float(split.marketplace_fee),
            seller_credential=store.payment_credential,
            payer_email=command.buyer_email,
            title=f"Order {placed.order_id} - {store.name}",
        )
        if not result.success:
            logger.warning(
                "payment_preference_failed",
                order_id=placed.order_id,
                store_id=priced.store_id,
                reason=result.failure_reason,
            )
            raise UpstreamError({"payment": [f"Payment provider error: {result.failure_reason}"]})

        order = placed.order
        order.record_payment_reference(result.reference)
        current_domain.repository_for(Order).add(order)

        return {
            "order_id": placed.order_id,
            "total_amount": order.total_amount,
            "redirect_url": result.redirect_url,
        }

    @handle(SimulatePurchase)
    def simulate_purchase(self, command):
        items, address, priced = _price_single_store(command)

        placed = create_order(
            buyer_id=command.buyer_id,
            store_id=priced.store_id,
            total_amount=priced.total_with_shipping,
            initial_status=OrderStatus.PROCESSING,
            payment_reference=SIMULATED_REFERENCE,
            items=items,
            address=address,
        )
        return {
            "order_id": placed.order_id,
            "total_amount": placed.order.total_amount,
            "delivery_code": placed.delivery_code,
        }
