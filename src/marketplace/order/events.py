"""Order domain events."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    total_amount = Float(required=True)
    status = String(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentReferenceRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    recorded_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    paid_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class DeliveryMethodChosen:
    __version__ = 1

    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    delivery_method = String(required=True)
    chosen_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    total_amount = Float(required=True)
    marketplace_fee = Float(required=True)
    seller_earnings = Float(required=True)
    completed_at = DateTime(required=True)
