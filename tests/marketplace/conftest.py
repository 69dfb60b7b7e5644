import json

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _fresh_gateway():
    from marketplace.gateway import reset_gateway

    reset_gateway()
    yield
    reset_gateway()


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def open_store():
    """Open a store through the domain. Returns the store id."""
    from marketplace.catalog.listing import OpenStore
    from protean import current_domain

    def _open(seller_id="seller-1", name="Padaria Central", payment_credential="TEST-seller-token", **overrides):
        command = OpenStore(
            name=name,
            seller_id=seller_id,
            payment_credential=payment_credential,
            address_street=overrides.get("address_street", "Rua das Flores"),
            address_number=overrides.get("address_number", "42"),
        )
        return current_domain.process(command, asynchronous=False)

    return _open


@pytest.fixture()
def list_product():
    """List a product through the domain. Returns the product id."""
    from marketplace.catalog.listing import ListProduct
    from protean import current_domain

    def _list(store_id, name="Pão de Queijo", price=10.0, stock_quantity=10, shipping_options=None):
        command = ListProduct(
            store_id=store_id,
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            shipping_options=json.dumps(shipping_options) if shipping_options else None,
        )
        return current_domain.process(command, asynchronous=False)

    return _list


@pytest.fixture()
def register_courier():
    """Register a courier whose id is the given user id."""
    from marketplace.courier.registration import RegisterCourier
    from protean import current_domain

    def _register(courier_id="courier-a", name="Ana Entregas", phone="+55 11 90000-0001"):
        command = RegisterCourier(courier_id=courier_id, name=name, phone=phone)
        return current_domain.process(command, asynchronous=False)

    return _register


@pytest.fixture()
def simulate_purchase():
    """Create a paid order through checkout. Returns the handler's result dict."""
    from marketplace.order.checkout import SimulatePurchase
    from protean import current_domain

    def _simulate(product_id, quantity=1, buyer_id="buyer-1", address=None):
        command = SimulatePurchase(
            buyer_id=buyer_id,
            items=json.dumps([{"product_id": product_id, "quantity": quantity, "selected_options": {}}]),
            address=json.dumps(address or {"city_id": 1, "street": "Av. Brasil", "contact_phone": "+55 11 98888-0000"}),
        )
        return current_domain.process(command, asynchronous=False)

    return _simulate


@pytest.fixture()
def choose_method():
    from marketplace.delivery.decision import ChooseDeliveryMethod
    from protean import current_domain

    def _choose(order_id, delivery_method="Marketplace", seller_id="seller-1"):
        command = ChooseDeliveryMethod(order_id=order_id, seller_id=seller_id, delivery_method=delivery_method)
        return current_domain.process(command, asynchronous=False)

    return _choose


@pytest.fixture()
def accept():
    from marketplace.delivery.acceptance import AcceptDelivery
    from protean import current_domain

    def _accept(order_id, courier_id="courier-a"):
        return current_domain.process(AcceptDelivery(order_id=order_id, courier_id=courier_id), asynchronous=False)

    return _accept


@pytest.fixture()
def confirm_pickup():
    from marketplace.delivery.pickup import ConfirmPickup
    from protean import current_domain

    def _confirm(order_id, pickup_code, seller_id="seller-1"):
        command = ConfirmPickup(order_id=order_id, seller_id=seller_id, pickup_code=pickup_code)
        return current_domain.process(command, asynchronous=False)

    return _confirm


@pytest.fixture()
def confirm_delivery():
    from marketplace.delivery.confirmation import ConfirmDelivery
    from protean import current_domain

    def _confirm(order_id, delivery_code, confirmed_by="courier-a"):
        command = ConfirmDelivery(order_id=order_id, delivery_code=delivery_code, confirmed_by=confirmed_by)
        return current_domain.process(command, asynchronous=False)

    return _confirm


@pytest.fixture()
def catalog(open_store, list_product):
    """One store (seller-1) with one product: price 10.00, stock 10, no shipping options."""
    store_id = open_store()
    product_id = list_product(store_id)
    return {"store_id": store_id, "product_id": product_id}
