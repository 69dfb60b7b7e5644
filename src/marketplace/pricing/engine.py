"""Cart pricing.

``price_cart`` turns raw cart lines into a per-store breakdown with shipping.
It backs both the live cart preview and checkout, so the total a buyer sees
is the total the order is created with.

Lines are tolerated, not validated: unknown or inactive products and
malformed lines are skipped. Checkout uses ``parse_cart_line`` for the
strict variant.
"""

from collections import OrderedDict
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.catalog.product import Product, normalize_city_id
from marketplace.catalog.store import Store
from marketplace.config import DEFAULT_SHIPPING_COST
from marketplace.errors import DataIntegrityError, error_message
from marketplace.pricing.breakdown import CartBreakdown, CartLine, PricedLine, StoreBreakdown
from marketplace.utils.money import ZERO, to_money

logger = structlog.get_logger(__name__)


def coerce_quantity(value) -> int | None:
    """A positive integer quantity, or None when ``value`` is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        quantity = int(value.strip())
    else:
        return None
    return quantity if quantity > 0 else None


def parse_cart_line(raw) -> CartLine:
    """Strictly parse one cart line. Raises ``ValidationError`` on bad input."""
    if isinstance(raw, CartLine):
        return raw
    if not isinstance(raw, dict):
        raise ValidationError({"items": ["Each cart item must be an object"]})

    product_id = raw.get("product_id")
    if product_id in (None, ""):
        raise ValidationError({"product_id": ["Product id is required"]})

    quantity = coerce_quantity(raw.get("quantity"))
    if quantity is None:
        raise ValidationError({"quantity": [f"Invalid quantity for product {product_id}"]})

    options = raw.get("selected_options")
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ValidationError({"selected_options": ["Selected options must be an object"]})

    return CartLine(product_id=str(product_id), quantity=quantity, selected_options=options)


def normalize_cart_lines(raw_items) -> list[CartLine]:
    """Parse every usable line, skipping the rest."""
    lines = []
    for raw in raw_items or []:
        try:
            lines.append(parse_cart_line(raw))
        except ValidationError as exc:
            logger.debug("cart_line_skipped", reason=error_message(exc))
    return lines


def _shipping_cost(product: Product, city_id: int | None) -> Decimal:
    fallback = to_money(DEFAULT_SHIPPING_COST)
    if city_id is None:
        logger.info("default_shipping_applied", reason="no_buyer_city", store_id=str(product.store_id))
        return fallback
    try:
        cost = product.shipping_cost_for(city_id)
    except DataIntegrityError as exc:
        logger.warning(
            "malformed_shipping_options",
            product_id=str(product.id),
            store_id=str(product.store_id),
            error=error_message(exc),
        )
        return fallback
    if cost is None:
        logger.info(
            "default_shipping_applied",
            reason="no_matching_city",
            store_id=str(product.store_id),
            city_id=city_id,
        )
        return fallback
    return cost


def price_cart(items, buyer_city_id=None) -> CartBreakdown:
    """Price a cart, grouping lines per store in first-seen order."""
    lines = normalize_cart_lines(items)
    if not lines:
        return CartBreakdown()

    city_id = normalize_city_id(buyer_city_id)

    product_ids = list(dict.fromkeys(line.product_id for line in lines))
    products = {
        str(product.id): product
        for product in current_domain.repository_for(Product)
        ._dao.query.filter(id__in=product_ids, is_active=True)
        .all()
        .items
    }

    store_ids = list(dict.fromkeys(str(product.store_id) for product in products.values()))
    stores = {}
    if store_ids:
        stores = {
            str(store.id): store
            for store in current_domain.repository_for(Store)._dao.query.filter(id__in=store_ids).all().items
        }

    grouped: OrderedDict[str, list[PricedLine]] = OrderedDict()
    shipping: dict[str, Decimal] = {}
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            logger.debug("cart_line_skipped", product_id=line.product_id, reason="unknown or inactive product")
            continue

        store_id = str(product.store_id)
        if store_id not in grouped:
            grouped[store_id] = []
            shipping[store_id] = _shipping_cost(product, city_id)

        unit_price = to_money(product.price)
        grouped[store_id].append(
            PricedLine(
                product_id=line.product_id,
                name=product.name,
                unit_price=unit_price,
                quantity=line.quantity,
                line_total=to_money(unit_price * line.quantity),
                selected_options=line.selected_options,
                image_url=product.image_url,
            )
        )

    breakdowns = []
    for store_id, priced in grouped.items():
        subtotal = to_money(sum((p.line_total for p in priced), ZERO))
        store = stores.get(store_id)
        breakdowns.append(
            StoreBreakdown(
                store_id=store_id,
                store_name=store.name if store else "",
                items=tuple(priced),
                subtotal_products=subtotal,
                shipping_cost=shipping[store_id],
                total_with_shipping=to_money(subtotal + shipping[store_id]),
            )
        )

    subtotal = to_money(sum((b.subtotal_products for b in breakdowns), ZERO))
    shipping_total = to_money(sum((b.shipping_cost for b in breakdowns), ZERO))
    return CartBreakdown(
        subtotal=subtotal,
        shipping_total=shipping_total,
        total=to_money(subtotal + shipping_total),
        stores=tuple(breakdowns),
    )
