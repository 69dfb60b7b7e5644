"""Delivery domain events."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Delivery")
class DeliveryRequested:
    """A marketplace delivery is open for any available courier."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    requested_at = DateTime(required=True)


@marketplace.event(part_of="Delivery")
class DeliveryAssigned:
    """A contracted courier or the seller took the delivery at decision time."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    delivery_method = String(required=True)
    courier_id = Identifier()
    assigned_at = DateTime(required=True)


@marketplace.event(part_of="Delivery")
class DeliveryPickedUp:
    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    courier_id = Identifier()
    picked_up_at = DateTime(required=True)


@marketplace.event(part_of="Delivery")
class DeliveryConfirmed:
    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    delivery_method = String(required=True)
    courier_id = Identifier()
    confirmed_by = Identifier(required=True)
    delivered_at = DateTime(required=True)
