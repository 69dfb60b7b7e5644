"""Product aggregate (CQRS) — a sellable item listed by one store.

Shipping options are kept as the JSON text the seller entered:
``[{"city_id": 3, "cost": 7.5}, ...]``. They are turned into typed
``ShippingRate`` values only when read through ``shipping_rates()``.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.catalog.events import ProductListed
from marketplace.domain import marketplace
from marketplace.errors import DataIntegrityError
from marketplace.utils.money import to_money


@dataclass(frozen=True)
class ShippingRate:
    """Shipping cost charged by a store for deliveries into one city."""

    city_id: int
    cost: Decimal


def normalize_city_id(value) -> int | None:
    """City ids arrive as ints, numeric strings or nothing at all."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_shipping_options(raw) -> list[ShippingRate]:
    """Parse stored shipping options into rates.

    Raises ``DataIntegrityError`` when the stored data is not a list of
    ``{"city_id", "cost"}`` objects.
    """
    if raw in (None, ""):
        return []

    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DataIntegrityError({"shipping_options": [f"Not valid JSON: {exc.msg}"]}) from exc

    if not isinstance(data, list):
        raise DataIntegrityError({"shipping_options": ["Expected a list of shipping options"]})

    rates = []
    for option in data:
        if not isinstance(option, dict):
            raise DataIntegrityError({"shipping_options": ["Each shipping option must be an object"]})
        city_id = normalize_city_id(option.get("city_id"))
        if city_id is None:
            raise DataIntegrityError({"shipping_options": [f"Invalid city_id: {option.get('city_id')!r}"]})
        try:
            cost = to_money(option.get("cost"))
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise DataIntegrityError({"shipping_options": [f"Invalid cost: {option.get('cost')!r}"]}) from exc
        if not cost.is_finite() or cost < 0:
            raise DataIntegrityError({"shipping_options": [f"Invalid cost: {option.get('cost')!r}"]})
        rates.append(ShippingRate(city_id=city_id, cost=cost))
    return rates


@marketplace.aggregate
class Product:
    store_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    image_url = String(max_length=500)
    shipping_options = Text()  # JSON list of {"city_id", "cost"}
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        store_id,
        name: str,
        price: float,
        stock_quantity: int = 0,
        shipping_options: list[dict] | None = None,
        image_url: str | None = None,
    ):
        """List a new product. Shipping options are validated before storing."""
        if shipping_options:
            try:
                parse_shipping_options(shipping_options)
            except DataIntegrityError as exc:
                raise ValidationError(exc.messages) from exc
        now = datetime.now(UTC)
        product = cls(
            store_id=store_id,
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            image_url=image_url,
            shipping_options=json.dumps(shipping_options) if shipping_options else None,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                store_id=str(store_id),
                name=name,
                price=price,
                stock_quantity=stock_quantity,
                listed_at=now,
            )
        )
        return product

    def shipping_rates(self) -> list[ShippingRate]:
        return parse_shipping_options(self.shipping_options)

    def shipping_cost_for(self, city_id) -> Decimal | None:
        """The configured cost for ``city_id``, or None when the store has none."""
        city = normalize_city_id(city_id)
        if city is None:
            return None
        for rate in self.shipping_rates():
            if rate.city_id == city:
                return rate.cost
        return None

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
