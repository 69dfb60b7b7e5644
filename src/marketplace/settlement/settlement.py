"""Settlement — splitting a completed order's total between platform and seller.

The fee is rounded half-up to the cent and the seller gets the exact
remainder, so ``marketplace_fee + seller_earnings == total_amount`` holds to
the cent for every order. ``MARKETPLACE_FEE_RATE`` is the only fee rate.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.config import MARKETPLACE_FEE_RATE, fee_rate_percent
from marketplace.errors import PermissionDeniedError
from marketplace.utils.money import as_float, to_money

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Settlement:
    total_amount: Decimal
    marketplace_fee: Decimal
    seller_earnings: Decimal


def split_total(total_amount, fee_rate: Decimal = MARKETPLACE_FEE_RATE) -> Settlement:
    total = to_money(total_amount)
    fee = to_money(total * fee_rate)
    return Settlement(total_amount=total, marketplace_fee=fee, seller_earnings=total - fee)


def settle(order) -> Settlement:
    """Credit the order's store with its earnings.

    Must run in the unit of work that completes the order, so the credit and
    the completion commit together or not at all.
    """
    settlement = split_total(order.total_amount)

    repo = current_domain.repository_for(Store)
    store = repo.get(order.store_id)
    store.credit(
        amount=as_float(settlement.seller_earnings),
        order_id=order.id,
        marketplace_fee=as_float(settlement.marketplace_fee),
    )
    repo.add(store)

    logger.info(
        "seller_credited",
        order_id=str(order.id),
        store_id=str(store.id),
        marketplace_fee=as_float(settlement.marketplace_fee),
        seller_earnings=as_float(settlement.seller_earnings),
    )
    return settlement


def seller_balance(store_id, seller_id) -> dict:
    """Pending balance of a store, visible to its seller only."""
    store = current_domain.repository_for(Store).get(store_id)
    if not store.is_owned_by(seller_id):
        raise PermissionDeniedError({"store_id": ["You do not own this store"]})
    return {
        "store_id": str(store.id),
        "pending_balance": as_float(to_money(store.pending_balance or 0)),
        "marketplace_fee_percent": fee_rate_percent(),
    }
