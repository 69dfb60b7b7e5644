"""Pydantic API schemas for the marketplace.

These are the external API contracts, kept apart from domain commands; the
routes translate between the two. Every response carries ``success``.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str | int | None = None
    quantity: Any = None
    selected_options: dict[str, Any] | None = None


class AddressRequest(BaseModel):
    city_id: int | str | None = None
    district_id: int | str | None = None
    street: str | None = None
    number: str | None = None
    landmark: str | None = None
    contact_phone: str | None = None


class PriceCartRequest(BaseModel):
    items: list[CartItemRequest] = Field(default_factory=list)
    buyer_city_id: int | str | None = None


class CheckoutRequest(BaseModel):
    items: list[CartItemRequest] = Field(default_factory=list)
    address: AddressRequest | None = None
    buyer_email: str | None = None


class ConfirmPaymentRequest(BaseModel):
    payment_reference: str


class ChooseDeliveryMethodRequest(BaseModel):
    delivery_method: str


class ConfirmPickupRequest(BaseModel):
    pickup_code: str


class ConfirmDeliveryRequest(BaseModel):
    order_id: str
    delivery_code: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class PricedLineResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    line_total: float
    selected_options: dict[str, Any] = Field(default_factory=dict)
    image_url: str | None = None


class StoreBreakdownResponse(BaseModel):
    store_id: str
    store_name: str
    items: list[PricedLineResponse]
    subtotal_products: float
    shipping_cost: float
    total_with_shipping: float


class CartPriceResponse(SuccessResponse):
    subtotal: float
    shipping_total: float
    total: float
    store_count: int
    stores: list[StoreBreakdownResponse]


class PlaceOrderResponse(SuccessResponse):
    order_id: str
    total_amount: float
    redirect_url: str | None = None


class SimulatedPurchaseResponse(SuccessResponse):
    order_id: str
    total_amount: float
    delivery_code: str


class DeliveryDecisionResponse(SuccessResponse):
    delivery_id: str
    status: str


class AcceptDeliveryResponse(SuccessResponse):
    order_id: str
    pickup_code: str


class ConfirmDeliveryResponse(SuccessResponse):
    order_id: str
    marketplace_fee: float
    seller_earnings: float


class OrdersResponse(SuccessResponse):
    orders: list[dict[str, Any]]


class OrderStatusResponse(SuccessResponse):
    order: dict[str, Any]


class CurrentDeliveryResponse(SuccessResponse):
    delivery: dict[str, Any] | None = None


class BalanceResponse(SuccessResponse):
    store_id: str
    pending_balance: float
    marketplace_fee_percent: float
