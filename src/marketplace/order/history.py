"""Order reads for buyers and sellers.

Each order is rendered with its store, items and current delivery state.
Buyers see the delivery code (they hand it to whoever delivers); sellers
see the pickup code (they check it against the courier's) along with the
delivery address and buyer contact.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalog.store import Store
from marketplace.courier.courier import Courier
from marketplace.delivery.delivery import Delivery
from marketplace.errors import PermissionDeniedError
from marketplace.order.order import Order
from marketplace.utils.money import as_float, to_money


def _by_id(aggregate_cls, ids, **filters) -> dict:
    ids = list(dict.fromkeys(str(i) for i in ids if i))
    if not ids:
        return {}
    return {
        str(record.id): record
        for record in current_domain.repository_for(aggregate_cls)._dao.query.filter(id__in=ids, **filters).all().items
    }


def _deliveries_by_order(order_ids) -> dict:
    ids = [str(i) for i in order_ids]
    if not ids:
        return {}
    return {
        str(delivery.order_id): delivery
        for delivery in current_domain.repository_for(Delivery)._dao.query.filter(order_id__in=ids).all().items
    }


def address_dict(order) -> dict | None:
    """The buyer's delivery address snapshot as a plain dict."""
    if order.address is None:
        return None
    return {
        "city_id": order.address.city_id,
        "district_id": order.address.district_id,
        "street": order.address.street,
        "number": order.address.number,
        "landmark": order.address.landmark,
        "contact_phone": order.address.contact_phone,
    }


def _render(orders, *, show_delivery_code: bool, show_pickup_code: bool) -> list[dict]:
    stores = _by_id(Store, [o.store_id for o in orders])
    deliveries = _deliveries_by_order([o.id for o in orders])
    couriers = _by_id(Courier, [d.courier_id for d in deliveries.values()])

    order_repo = current_domain.repository_for(Order)
    rendered = []
    for summary in orders:
        # Query results do not carry items; load the full aggregate
        order = order_repo.get(summary.id)
        store = stores.get(str(order.store_id))
        delivery = deliveries.get(str(order.id))
        courier = couriers.get(str(delivery.courier_id)) if delivery and delivery.courier_id else None

        entry = {
            "order_id": str(order.id),
            "status": order.status,
            "total_amount": as_float(to_money(order.total_amount)),
            "delivery_method": order.delivery_method,
            "store_id": str(order.store_id),
            "store_name": store.name if store else "",
            "delivery_status": delivery.status if delivery else None,
            "courier_name": courier.name if courier else None,
            "created_at": order.created_at.isoformat() if order.created_at else None,
            "items": [
                {
                    "product_id": str(item.product_id),
                    "product_name": item.product_name,
                    "unit_price": item.unit_price,
                    "quantity": item.quantity,
                    "selected_options": item.options,
                }
                for item in order.items or []
            ],
        }
        if show_delivery_code:
            entry["delivery_code"] = order.delivery_code
        if show_pickup_code:
            entry["pickup_code"] = order.pickup_code
            entry["delivery_address"] = address_dict(order)
            entry["buyer_contact"] = order.address.contact_phone if order.address else None
        rendered.append(entry)
    return rendered


def buyer_orders(buyer_id) -> list[dict]:
    """The buyer's orders, newest first."""
    orders = (
        current_domain.repository_for(Order)
        ._dao.query.filter(buyer_id=str(buyer_id))
        .order_by("-created_at")
        .all()
        .items
    )
    return _render(orders, show_delivery_code=True, show_pickup_code=False)


def store_orders(store_id, seller_id) -> list[dict]:
    """A store's orders, newest first. Only the store's seller may look."""
    store = current_domain.repository_for(Store).get(store_id)
    if not store.is_owned_by(seller_id):
        raise PermissionDeniedError({"store_id": ["You do not own this store"]})

    orders = (
        current_domain.repository_for(Order)
        ._dao.query.filter(store_id=str(store_id))
        .order_by("-created_at")
        .all()
        .items
    )
    return _render(orders, show_delivery_code=False, show_pickup_code=True)


def order_status(order_id, buyer_id) -> dict:
    """Live status of one of the buyer's orders."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        order = None
    if order is None or str(order.buyer_id) != str(buyer_id):
        raise ObjectNotFoundError({"order_id": ["Order not found"]})
    return _render([order], show_delivery_code=True, show_pickup_code=False)[0]
