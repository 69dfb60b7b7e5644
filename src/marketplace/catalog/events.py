"""Catalog domain events — stores opening, products listed, sellers credited."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Store")
class StoreOpened:
    __version__ = 1

    store_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    opened_at = DateTime(required=True)


@marketplace.event(part_of="Store")
class CourierContracted:
    __version__ = 1

    store_id = Identifier(required=True)
    courier_id = Identifier(required=True)
    contracted_at = DateTime(required=True)


@marketplace.event(part_of="Store")
class SellerCredited:
    """A completed order's earnings were added to the seller's pending balance."""

    __version__ = 1

    store_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    marketplace_fee = Float(required=True)
    new_pending_balance = Float(required=True)
    credited_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductListed:
    __version__ = 1

    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock_quantity = Integer(required=True)
    listed_at = DateTime(required=True)
