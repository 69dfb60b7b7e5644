"""Courier-facing reads: open jobs and the courier's current delivery.

These are polling reads; couriers refresh them, nothing is pushed.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.courier.courier import CourierAvailability, release_courier
from marketplace.delivery.acceptance import registered_courier
from marketplace.delivery.delivery import ACTIVE_STATUSES, Delivery, DeliveryStatus
from marketplace.order.history import address_dict
from marketplace.order.order import DeliveryMethod, Order, OrderStatus
from marketplace.utils.money import as_float, to_money

logger = structlog.get_logger(__name__)


def _stores_by_id(store_ids) -> dict:
    ids = list(dict.fromkeys(str(store_id) for store_id in store_ids))
    if not ids:
        return {}
    return {
        str(store.id): store
        for store in current_domain.repository_for(Store)._dao.query.filter(id__in=ids).all().items
    }


def available_jobs(courier_id) -> dict:
    """Marketplace deliveries nobody has accepted yet, oldest first."""
    courier = registered_courier(courier_id)
    if not courier.is_available:
        return {"orders": [], "message": "You are busy with a delivery right now."}

    open_deliveries = (
        current_domain.repository_for(Delivery)
        ._dao.query.filter(
            status=DeliveryStatus.REQUESTED.value,
            delivery_method=DeliveryMethod.MARKETPLACE.value,
            courier_id__isnull=True,
        )
        .all()
        .items
    )
    order_ids = [str(d.order_id) for d in open_deliveries]
    if not order_ids:
        return {"orders": []}

    orders = (
        current_domain.repository_for(Order)
        ._dao.query.filter(id__in=order_ids, status=OrderStatus.DELIVERING.value)
        .order_by("created_at")
        .all()
        .items
    )
    stores = _stores_by_id(order.store_id for order in orders)

    jobs = []
    for order in orders:
        store = stores.get(str(order.store_id))
        jobs.append(
            {
                "order_id": str(order.id),
                "store_id": str(order.store_id),
                "store_name": store.name if store else "",
                "store_address": store.display_address if store else "",
                "total_amount": as_float(to_money(order.total_amount)),
                "delivery_city_id": order.address.city_id if order.address else None,
                "delivery_district_id": order.address.district_id if order.address else None,
                "created_at": order.created_at.isoformat() if order.created_at else None,
            }
        )
    return {"orders": jobs}


def current_delivery(courier_id) -> dict:
    """The one delivery the courier is working on, if any.

    A courier marked Assigned without an active delivery is released, so a
    missed release can never lock them out of the job board.
    """
    courier = registered_courier(courier_id)

    active = (
        current_domain.repository_for(Delivery)
        ._dao.query.filter(courier_id=str(courier_id), status__in=list(ACTIVE_STATUSES))
        .all()
        .items
    )
    order_repo = current_domain.repository_for(Order)
    for delivery in active:
        order = order_repo.get(delivery.order_id)
        if order.status != OrderStatus.DELIVERING.value:
            continue

        store = current_domain.repository_for(Store).get(order.store_id)
        return {
            "delivery": {
                "order_id": str(order.id),
                "status": delivery.status,
                "delivery_method": delivery.delivery_method,
                "total_amount": as_float(to_money(order.total_amount)),
                "pickup_code": order.pickup_code,
                "store_name": store.name,
                "store_address": store.display_address,
                "delivery_address": address_dict(order),
                "buyer_contact": order.address.contact_phone if order.address else None,
                "items": [
                    {
                        "product_name": item.product_name,
                        "quantity": item.quantity,
                        "selected_options": item.options,
                    }
                    for item in order.items or []
                ],
                "accepted_at": delivery.accepted_at.isoformat() if delivery.accepted_at else None,
            }
        }

    if courier.availability == CourierAvailability.ASSIGNED.value:
        release_courier(courier.id)
        logger.warning("courier_availability_reset", courier_id=str(courier.id))
        return {"delivery": None, "message": "No active delivery found. Your availability was reset."}

    return {"delivery": None}
