"""Shared BDD fixtures and step definitions for marketplace scenarios."""

import pytest
from marketplace.courier.courier import Courier, CourierAvailability
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def world():
    """Ids and codes carried between steps."""
    return {"error": None}


@given(
    parsers.cfparse('a store owned by "{seller_id}" selling "{name}" at {price:f} with {stock:d} in stock'),
)
def store_with_product(world, open_store, list_product, seller_id, name, price, stock):
    world["seller_id"] = seller_id
    world["store_id"] = open_store(seller_id=seller_id)
    world["product_id"] = list_product(world["store_id"], name=name, price=price, stock_quantity=stock)


@given(parsers.cfparse('a registered courier "{courier_id}"'))
def courier(register_courier, courier_id):
    register_courier(courier_id, name=f"Courier {courier_id}")


@then(parsers.cfparse('courier "{courier_id}" is busy'))
def courier_is_busy(courier_id):
    courier = current_domain.repository_for(Courier).get(courier_id)
    assert courier.availability == CourierAvailability.ASSIGNED.value


@then(parsers.cfparse('courier "{courier_id}" is available'))
def courier_is_available(courier_id):
    courier = current_domain.repository_for(Courier).get(courier_id)
    assert courier.availability == CourierAvailability.AVAILABLE.value
