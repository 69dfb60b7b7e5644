"""Catalog setup — opening stores, contracting couriers, listing products."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalog.product import Product
from marketplace.catalog.store import Store
from marketplace.courier.courier import Courier
from marketplace.domain import marketplace


@marketplace.command(part_of="Store")
class OpenStore:
    name = String(required=True, max_length=255)
    seller_id = Identifier(required=True)
    payment_credential = String(max_length=500)
    address_street = String(max_length=255)
    address_number = String(max_length=50)


@marketplace.command(part_of="Store")
class ContractCourier:
    """Attach a courier to a store for ``Contracted`` deliveries."""

    store_id = Identifier(required=True)
    courier_id = Identifier(required=True)


@marketplace.command(part_of="Product")
class ListProduct:
    store_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    image_url = String(max_length=500)
    shipping_options = Text()  # JSON list of {"city_id", "cost"}


@marketplace.command_handler(part_of=Store)
class StoreSetupHandler:
    @handle(OpenStore)
    def open_store(self, command):
        store = Store.open(
            name=command.name,
            seller_id=command.seller_id,
            payment_credential=command.payment_credential,
            address_street=command.address_street,
            address_number=command.address_number,
        )
        current_domain.repository_for(Store).add(store)
        return str(store.id)

    @handle(ContractCourier)
    def contract_courier(self, command):
        # Raises ObjectNotFoundError for an unknown courier
        current_domain.repository_for(Courier).get(command.courier_id)

        repo = current_domain.repository_for(Store)
        store = repo.get(command.store_id)
        store.contract_courier(command.courier_id)
        repo.add(store)


@marketplace.command_handler(part_of=Product)
class ListProductHandler:
    @handle(ListProduct)
    def list_product(self, command):
        # Raises ObjectNotFoundError for an unknown store
        current_domain.repository_for(Store).get(command.store_id)

        options = command.shipping_options
        if isinstance(options, str) and options:
            try:
                options = json.loads(options)
            except json.JSONDecodeError as exc:
                raise ValidationError({"shipping_options": ["Shipping options must be valid JSON"]}) from exc

        product = Product.create(
            store_id=command.store_id,
            name=command.name,
            price=command.price,
            stock_quantity=command.stock_quantity or 0,
            shipping_options=options or None,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)
