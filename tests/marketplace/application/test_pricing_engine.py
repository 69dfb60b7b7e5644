"""Tests for cart pricing against stored products and stores."""

from decimal import Decimal

import pytest
from marketplace.catalog.product import Product
from marketplace.pricing.engine import price_cart
from protean import current_domain


def _line(product_id, quantity=1, **options):
    return {"product_id": product_id, "quantity": quantity, "selected_options": options}


class TestSingleStore:
    def test_end_to_end_cart(self, catalog):
        breakdown = price_cart([_line(catalog["product_id"], 2)])

        assert breakdown.subtotal == Decimal("20.00")
        assert breakdown.shipping_total == Decimal("5.00")
        assert breakdown.total == Decimal("25.00")
        assert breakdown.store_count == 1

        store = breakdown.stores[0]
        assert store.store_id == catalog["store_id"]
        assert store.store_name == "Padaria Central"
        assert store.subtotal_products == Decimal("20.00")
        assert store.total_with_shipping == Decimal("25.00")
        assert store.items[0].line_total == Decimal("20.00")

    def test_selected_options_are_echoed(self, catalog):
        breakdown = price_cart([_line(catalog["product_id"], 1, size="G", filling="cheese")])
        assert breakdown.stores[0].items[0].selected_options == {"size": "G", "filling": "cheese"}

    def test_prices_round_half_up(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, price=0.125, stock_quantity=5)
        breakdown = price_cart([_line(product_id, 3)])
        # 0.125 rounds to 0.13 per unit
        assert breakdown.subtotal == Decimal("0.39")


class _RecordingLogger:
    def __init__(self):
        self.events = []

    def _record(self, event, **fields):
        self.events.append((event, fields))

    debug = info = warning = error = _record


@pytest.fixture()
def pricing_log(monkeypatch):
    recorder = _RecordingLogger()
    monkeypatch.setattr("marketplace.pricing.engine.logger", recorder)
    return recorder


class TestShipping:
    def test_city_specific_cost(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}, {"city_id": 2, "cost": 12}])
        breakdown = price_cart([_line(product_id, 1)], buyer_city_id=2)
        assert breakdown.shipping_total == Decimal("12.00")
        assert breakdown.total == Decimal("22.00")

    def test_city_ids_are_normalized(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": "3", "cost": 4}])
        breakdown = price_cart([_line(product_id, 1)], buyer_city_id="3")
        assert breakdown.shipping_total == Decimal("4.00")

    def test_fallback_without_matching_city(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}])
        assert price_cart([_line(product_id, 1)], buyer_city_id=9).shipping_total == Decimal("5.00")

    def test_fallback_without_buyer_city(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}])
        assert price_cart([_line(product_id, 1)]).shipping_total == Decimal("5.00")

    def test_fallbacks_are_logged(self, open_store, list_product, pricing_log):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}])

        price_cart([_line(product_id, 1)], buyer_city_id=9)
        price_cart([_line(product_id, 1)])

        reasons = [fields["reason"] for event, fields in pricing_log.events if event == "default_shipping_applied"]
        assert reasons == ["no_matching_city", "no_buyer_city"]

    def test_city_specific_cost_is_not_logged(self, open_store, list_product, pricing_log):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}])
        price_cart([_line(product_id, 1)], buyer_city_id=1)
        assert not [event for event, _ in pricing_log.events if event == "default_shipping_applied"]

    def test_fallback_for_non_numeric_city(self, open_store, list_product):
        store_id = open_store()
        product_id = list_product(store_id, shipping_options=[{"city_id": 1, "cost": 7.5}])
        assert price_cart([_line(product_id, 1)], buyer_city_id="downtown").shipping_total == Decimal("5.00")

    def test_malformed_stored_options_fall_back(self, open_store):
        store_id = open_store()
        product = Product(store_id=store_id, name="Broken", price=10.0, stock_quantity=5, shipping_options="{not json")
        current_domain.repository_for(Product).add(product)

        breakdown = price_cart([_line(str(product.id), 1)], buyer_city_id=1)
        assert breakdown.shipping_total == Decimal("5.00")
        assert breakdown.total == Decimal("15.00")

    def test_shipping_resolved_once_per_store_from_first_product(self, open_store, list_product):
        store_id = open_store()
        first = list_product(store_id, name="First", shipping_options=[{"city_id": 1, "cost": 3}])
        second = list_product(store_id, name="Second", shipping_options=[{"city_id": 1, "cost": 9}])

        breakdown = price_cart([_line(first, 1), _line(second, 1)], buyer_city_id=1)
        assert breakdown.store_count == 1
        assert breakdown.shipping_total == Decimal("3.00")
        assert breakdown.total == Decimal("23.00")


class TestMultipleStores:
    def test_grouped_per_store_in_first_seen_order(self, open_store, list_product):
        store_a = open_store(seller_id="seller-a", name="Store A")
        store_b = open_store(seller_id="seller-b", name="Store B")
        a1 = list_product(store_a, price=10.0)
        b1 = list_product(store_b, price=4.0)
        a2 = list_product(store_a, price=1.5)

        breakdown = price_cart([_line(b1, 1), _line(a1, 1), _line(a2, 2)])

        assert [s.store_name for s in breakdown.stores] == ["Store B", "Store A"]
        assert breakdown.store_count == 2
        assert breakdown.subtotal == Decimal("17.00")
        assert breakdown.shipping_total == Decimal("10.00")
        assert breakdown.total == Decimal("27.00")
        assert breakdown.stores[1].subtotal_products == Decimal("13.00")

    def test_total_is_sum_of_store_totals(self, open_store, list_product):
        store_a = open_store(seller_id="seller-a", name="Store A")
        store_b = open_store(seller_id="seller-b", name="Store B")
        a1 = list_product(store_a, price=3.33)
        b1 = list_product(store_b, price=6.67, shipping_options=[{"city_id": 1, "cost": 2.5}])

        breakdown = price_cart([_line(a1, 3), _line(b1, 1)], buyer_city_id=1)
        assert breakdown.total == sum((s.total_with_shipping for s in breakdown.stores), Decimal("0"))
        assert breakdown.total == breakdown.subtotal + breakdown.shipping_total


class TestSkippedLines:
    def test_unknown_products_are_skipped(self, catalog):
        breakdown = price_cart([_line("does-not-exist", 1), _line(catalog["product_id"], 1)])
        assert breakdown.store_count == 1
        assert breakdown.total == Decimal("15.00")

    def test_inactive_products_are_skipped(self, catalog):
        repo = current_domain.repository_for(Product)
        product = repo.get(catalog["product_id"])
        product.deactivate()
        repo.add(product)

        breakdown = price_cart([_line(catalog["product_id"], 1)])
        assert breakdown.store_count == 0

    def test_invalid_lines_are_skipped(self, catalog):
        breakdown = price_cart(
            [
                {"product_id": catalog["product_id"], "quantity": 0},
                {"product_id": catalog["product_id"], "quantity": "lots"},
                {"quantity": 2},
                _line(catalog["product_id"], 1),
            ]
        )
        assert breakdown.subtotal == Decimal("10.00")

    def test_empty_cart_is_zero(self):
        breakdown = price_cart([])
        assert breakdown.store_count == 0
        assert breakdown.total == Decimal("0.00")
        assert breakdown.as_dict() == {
            "subtotal": 0.0,
            "shipping_total": 0.0,
            "total": 0.0,
            "store_count": 0,
            "stores": [],
        }

    def test_all_invalid_cart_is_zero(self):
        breakdown = price_cart([_line("nope", 1), {"product_id": "x", "quantity": -1}])
        assert breakdown.store_count == 0
        assert breakdown.total == Decimal("0.00")
