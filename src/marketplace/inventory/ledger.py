"""Stock reservation against ``Product.stock_quantity``.

A reservation reads the current stock and writes the decremented value only
if the stock is still the value that was read. A zero-row write means another
reservation got there first; the read is repeated a bounded number of times.
There is no release step: a failed reservation aborts the caller's unit of
work, which also discards any reservations already made in it.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from marketplace.catalog.product import Product
from marketplace.config import STOCK_RESERVATION_ATTEMPTS
from marketplace.errors import ConflictError, InsufficientStockError
from marketplace.utils.conditional import compare_and_set

logger = structlog.get_logger(__name__)


def _current_stock(product_id) -> int:
    product = current_domain.repository_for(Product)._dao.query.filter(id=product_id).all().first
    if product is None:
        raise ObjectNotFoundError({"product_id": [f"Product {product_id} not found"]})
    return product.stock_quantity or 0


def reserve(product_id, quantity: int) -> int:
    """Decrement stock by ``quantity``. Returns the remaining stock."""
    if quantity is None or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})

    for attempt in range(1, STOCK_RESERVATION_ATTEMPTS + 1):
        available = _current_stock(product_id)
        if available < quantity:
            raise InsufficientStockError(
                {"stock": [f"Insufficient stock for product {product_id}: {available} left, {quantity} requested"]}
            )

        if compare_and_set(
            Product,
            {"id": product_id, "stock_quantity": available},
            stock_quantity=available - quantity,
        ):
            return available - quantity

        logger.info("stock_reservation_retry", product_id=str(product_id), attempt=attempt)

    raise ConflictError({"stock": [f"Stock for product {product_id} is changing too quickly, try again"]})
