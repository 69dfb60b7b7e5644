"""Priced cart structures returned by ``price_cart``.

All amounts are ``Decimal`` rounded half-up to the cent. ``as_dict`` renders
them as floats for JSON responses.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from marketplace.utils.money import ZERO, as_float


@dataclass(frozen=True)
class CartLine:
    """One requested cart line after input normalization."""

    product_id: str
    quantity: int
    selected_options: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    selected_options: dict = field(default_factory=dict)
    image_url: str | None = None

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": as_float(self.unit_price),
            "quantity": self.quantity,
            "line_total": as_float(self.line_total),
            "selected_options": self.selected_options,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class StoreBreakdown:
    store_id: str
    store_name: str
    items: tuple[PricedLine, ...]
    subtotal_products: Decimal
    shipping_cost: Decimal
    total_with_shipping: Decimal

    def as_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "store_name": self.store_name,
            "items": [line.as_dict() for line in self.items],
            "subtotal_products": as_float(self.subtotal_products),
            "shipping_cost": as_float(self.shipping_cost),
            "total_with_shipping": as_float(self.total_with_shipping),
        }


@dataclass(frozen=True)
class CartBreakdown:
    subtotal: Decimal = ZERO
    shipping_total: Decimal = ZERO
    total: Decimal = ZERO
    stores: tuple[StoreBreakdown, ...] = ()

    @property
    def store_count(self) -> int:
        return len(self.stores)

    @property
    def is_empty(self) -> bool:
        return not self.stores

    def as_dict(self) -> dict:
        return {
            "subtotal": as_float(self.subtotal),
            "shipping_total": as_float(self.shipping_total),
            "total": as_float(self.total),
            "store_count": self.store_count,
            "stores": [store.as_dict() for store in self.stores],
        }
