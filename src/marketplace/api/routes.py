"""FastAPI routes for the marketplace.

The caller is identified by the ``X-User-Id`` header, set by the upstream
authentication layer. Commands run synchronously through the domain; reads
call the query functions directly.
"""

import json

from fastapi import APIRouter, Header, HTTPException
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    AcceptDeliveryResponse,
    BalanceResponse,
    CartPriceResponse,
    CheckoutRequest,
    ChooseDeliveryMethodRequest,
    ConfirmDeliveryRequest,
    ConfirmDeliveryResponse,
    ConfirmPaymentRequest,
    ConfirmPickupRequest,
    CurrentDeliveryResponse,
    DeliveryDecisionResponse,
    OrdersResponse,
    OrderStatusResponse,
    PlaceOrderResponse,
    PriceCartRequest,
    SimulatedPurchaseResponse,
    SuccessResponse,
)
from marketplace.delivery.acceptance import AcceptDelivery
from marketplace.delivery.confirmation import ConfirmDelivery
from marketplace.delivery.decision import ChooseDeliveryMethod
from marketplace.delivery.dispatch_board import available_jobs, current_delivery
from marketplace.delivery.pickup import ConfirmPickup
from marketplace.gateway import get_gateway
from marketplace.order.checkout import PlaceOrder, SimulatePurchase
from marketplace.order.history import buyer_orders, order_status, store_orders
from marketplace.order.payment import ConfirmPayment
from marketplace.pricing.engine import price_cart
from marketplace.settlement.settlement import seller_balance


def _cart_json(body: CheckoutRequest) -> tuple[str, str | None]:
    items = json.dumps([item.model_dump() for item in body.items])
    address = json.dumps(body.address.model_dump()) if body.address else None
    return items, address


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.post("/price", response_model=CartPriceResponse)
async def price_cart_preview(body: PriceCartRequest) -> CartPriceResponse:
    """Live cart preview, priced exactly as checkout will price it."""
    breakdown = price_cart([item.model_dump() for item in body.items], body.buyer_city_id)
    return CartPriceResponse(**breakdown.as_dict())


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
async def place_order(body: CheckoutRequest, x_user_id: str = Header()) -> PlaceOrderResponse:
    """Create an order awaiting payment and return the provider's checkout URL."""
    items, address = _cart_json(body)
    command = PlaceOrder(buyer_id=x_user_id, buyer_email=body.buyer_email, items=items, address=address)
    result = current_domain.process(command, asynchronous=False)
    return PlaceOrderResponse(**result)


@order_router.post("/simulate-purchase", status_code=201, response_model=SimulatedPurchaseResponse)
async def simulate_purchase(body: CheckoutRequest, x_user_id: str = Header()) -> SimulatedPurchaseResponse:
    items, address = _cart_json(body)
    command = SimulatePurchase(buyer_id=x_user_id, items=items, address=address)
    result = current_domain.process(command, asynchronous=False)
    return SimulatedPurchaseResponse(**result, message="Purchase simulated.")


@order_router.put("/{order_id}/payment", response_model=SuccessResponse)
async def confirm_payment(
    order_id: str,
    body: ConfirmPaymentRequest,
    x_gateway_signature: str = Header(default=""),
) -> SuccessResponse:
    """Payment provider notification: the buyer has paid."""
    if not get_gateway().verify_webhook_signature(json.dumps(body.model_dump()), x_gateway_signature):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    command = ConfirmPayment(order_id=order_id, payment_reference=body.payment_reference)
    current_domain.process(command, asynchronous=False)
    return SuccessResponse(message="Payment confirmed.")


@order_router.put("/{order_id}/delivery-method", response_model=DeliveryDecisionResponse)
async def choose_delivery_method(
    order_id: str,
    body: ChooseDeliveryMethodRequest,
    x_user_id: str = Header(),
) -> DeliveryDecisionResponse:
    command = ChooseDeliveryMethod(
        order_id=order_id,
        seller_id=x_user_id,
        delivery_method=body.delivery_method,
    )
    result = current_domain.process(command, asynchronous=False)
    return DeliveryDecisionResponse(**result)


@order_router.put("/{order_id}/confirm-pickup", response_model=SuccessResponse)
async def confirm_pickup(order_id: str, body: ConfirmPickupRequest, x_user_id: str = Header()) -> SuccessResponse:
    command = ConfirmPickup(order_id=order_id, seller_id=x_user_id, pickup_code=body.pickup_code)
    current_domain.process(command, asynchronous=False)
    return SuccessResponse(message="Pickup confirmed.")


@order_router.get("/mine", response_model=OrdersResponse)
async def my_orders(x_user_id: str = Header()) -> OrdersResponse:
    return OrdersResponse(orders=buyer_orders(x_user_id))


@order_router.get("/store/{store_id}", response_model=OrdersResponse)
async def orders_for_store(store_id: str, x_user_id: str = Header()) -> OrdersResponse:
    return OrdersResponse(orders=store_orders(store_id, x_user_id))


@order_router.get("/{order_id}/status", response_model=OrderStatusResponse)
async def live_order_status(order_id: str, x_user_id: str = Header()) -> OrderStatusResponse:
    return OrderStatusResponse(order=order_status(order_id, x_user_id))


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.get("/available", response_model=OrdersResponse)
async def list_available_jobs(x_user_id: str = Header()) -> OrdersResponse:
    return OrdersResponse(**available_jobs(x_user_id))


@delivery_router.put("/{order_id}/accept", response_model=AcceptDeliveryResponse)
async def accept_delivery(order_id: str, x_user_id: str = Header()) -> AcceptDeliveryResponse:
    command = AcceptDelivery(order_id=order_id, courier_id=x_user_id)
    result = current_domain.process(command, asynchronous=False)
    return AcceptDeliveryResponse(**result, message="Delivery accepted. Show the pickup code at the store.")


@delivery_router.get("/current", response_model=CurrentDeliveryResponse)
async def get_current_delivery(x_user_id: str = Header()) -> CurrentDeliveryResponse:
    return CurrentDeliveryResponse(**current_delivery(x_user_id))


@delivery_router.post("/confirm", response_model=ConfirmDeliveryResponse)
async def confirm_delivery(body: ConfirmDeliveryRequest, x_user_id: str = Header()) -> ConfirmDeliveryResponse:
    command = ConfirmDelivery(
        order_id=body.order_id,
        delivery_code=body.delivery_code,
        confirmed_by=x_user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return ConfirmDeliveryResponse(**result, message="Delivery confirmed.")


# ---------------------------------------------------------------------------
# Store Router
# ---------------------------------------------------------------------------
store_router = APIRouter(prefix="/stores", tags=["stores"])


@store_router.get("/{store_id}/balance", response_model=BalanceResponse)
async def store_balance(store_id: str, x_user_id: str = Header()) -> BalanceResponse:
    return BalanceResponse(**seller_balance(store_id, x_user_id))
