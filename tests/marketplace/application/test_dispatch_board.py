"""Tests for the courier job board and current-delivery reads."""

import pytest
from marketplace.courier.courier import Courier, CourierAvailability, claim_courier
from marketplace.delivery.dispatch_board import available_jobs, current_delivery
from marketplace.errors import PermissionDeniedError
from protean import current_domain


@pytest.fixture()
def couriers(register_courier):
    register_courier("courier-a", name="Ana Entregas")
    register_courier("courier-b", name="Bruno Bike")


class TestAvailableJobs:
    def test_lists_open_marketplace_jobs_oldest_first(self, couriers, catalog, simulate_purchase, choose_method):
        first = simulate_purchase(catalog["product_id"], quantity=1)["order_id"]
        second = simulate_purchase(catalog["product_id"], quantity=2)["order_id"]
        choose_method(first, "Marketplace")
        choose_method(second, "Marketplace")

        jobs = available_jobs("courier-a")["orders"]

        assert [job["order_id"] for job in jobs] == [first, second]
        assert jobs[0]["store_name"] == "Padaria Central"
        assert jobs[0]["store_address"] == "Rua das Flores, 42"
        assert jobs[0]["total_amount"] == 15.0
        assert jobs[0]["delivery_city_id"] == 1

    def test_hides_taken_and_non_marketplace_jobs(self, couriers, catalog, simulate_purchase, choose_method, accept):
        taken = simulate_purchase(catalog["product_id"])["order_id"]
        self_delivered = simulate_purchase(catalog["product_id"])["order_id"]
        undecided = simulate_purchase(catalog["product_id"])["order_id"]
        choose_method(taken, "Marketplace")
        choose_method(self_delivered, "Seller")
        accept(taken, "courier-a")

        ids = [job["order_id"] for job in available_jobs("courier-b")["orders"]]

        assert taken not in ids
        assert self_delivered not in ids
        assert undecided not in ids

    def test_busy_courier_sees_nothing(self, couriers, catalog, simulate_purchase, choose_method):
        order_id = simulate_purchase(catalog["product_id"])["order_id"]
        choose_method(order_id, "Marketplace")
        claim_courier("courier-a")

        board = available_jobs("courier-a")

        assert board["orders"] == []
        assert "busy" in board["message"]

    def test_only_couriers_may_look(self, couriers):
        with pytest.raises(PermissionDeniedError):
            available_jobs("buyer-1")


class TestCurrentDelivery:
    def test_shows_the_accepted_job(self, couriers, catalog, simulate_purchase, choose_method, accept):
        order_id = simulate_purchase(catalog["product_id"], quantity=2)["order_id"]
        choose_method(order_id, "Marketplace")
        pickup_code = accept(order_id, "courier-a")["pickup_code"]

        delivery = current_delivery("courier-a")["delivery"]

        assert delivery["order_id"] == order_id
        assert delivery["pickup_code"] == pickup_code
        assert delivery["store_name"] == "Padaria Central"
        assert delivery["buyer_contact"] == "+55 11 98888-0000"
        assert delivery["delivery_address"]["street"] == "Av. Brasil"
        assert delivery["items"] == [{"product_name": "Pão de Queijo", "quantity": 2, "selected_options": {}}]

    def test_idle_courier_has_none(self, couriers):
        assert current_delivery("courier-b") == {"delivery": None}

    def test_stuck_courier_is_released(self, couriers):
        claim_courier("courier-b")

        result = current_delivery("courier-b")

        assert result["delivery"] is None
        assert "reset" in result["message"]
        courier = current_domain.repository_for(Courier).get("courier-b")
        assert courier.availability == CourierAvailability.AVAILABLE.value
