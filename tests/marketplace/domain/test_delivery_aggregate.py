"""Tests for the Delivery aggregate — creation per method and transitions."""

import pytest
from marketplace.delivery.delivery import Delivery, DeliveryStatus
from marketplace.delivery.events import DeliveryAssigned, DeliveryConfirmed, DeliveryPickedUp, DeliveryRequested
from marketplace.order.order import DeliveryMethod
from protean.exceptions import ValidationError


class TestCreation:
    def test_marketplace_delivery_is_requested_without_courier(self):
        delivery = Delivery.request("ord-1")
        assert delivery.status == DeliveryStatus.REQUESTED.value
        assert delivery.delivery_method == DeliveryMethod.MARKETPLACE.value
        assert delivery.courier_id is None
        assert isinstance(delivery._events[-1], DeliveryRequested)

    def test_contracted_delivery_is_accepted_by_its_courier(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.CONTRACTED, courier_id="courier-c")
        assert delivery.status == DeliveryStatus.ACCEPTED.value
        assert delivery.courier_id == "courier-c"
        assert delivery.accepted_at is not None
        assert delivery.packing_started_at is None
        assert isinstance(delivery._events[-1], DeliveryAssigned)

    def test_seller_delivery_starts_packing(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.SELLER)
        assert delivery.status == DeliveryStatus.ACCEPTED.value
        assert delivery.courier_id is None
        assert delivery.packing_started_at is not None

    def test_contracted_needs_a_courier(self):
        with pytest.raises(ValidationError):
            Delivery.assign("ord-1", DeliveryMethod.CONTRACTED)

    def test_marketplace_cannot_be_assigned_directly(self):
        with pytest.raises(ValidationError):
            Delivery.assign("ord-1", DeliveryMethod.MARKETPLACE, courier_id="courier-a")


class TestTransitions:
    def test_pickup_then_confirm(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.CONTRACTED, courier_id="courier-c")
        delivery.mark_picked_up()
        assert delivery.status == DeliveryStatus.PICKED_UP.value
        assert delivery.picked_up_at is not None
        assert delivery.packing_started_at is not None
        assert isinstance(delivery._events[-1], DeliveryPickedUp)

        delivery.confirm_delivered(confirmed_by="courier-c")
        assert delivery.status == DeliveryStatus.DELIVERED_CONFIRMED.value
        assert delivery.delivered_at is not None
        assert delivery.buyer_confirmed_at is not None
        assert isinstance(delivery._events[-1], DeliveryConfirmed)

    def test_seller_delivery_confirms_without_pickup(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.SELLER)
        delivery.confirm_delivered(confirmed_by="seller-1")
        assert delivery.status == DeliveryStatus.DELIVERED_CONFIRMED.value

    def test_pickup_needs_a_courier(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.SELLER)
        with pytest.raises(ValidationError):
            delivery.mark_picked_up()

    def test_requested_delivery_cannot_be_confirmed(self):
        delivery = Delivery.request("ord-1")
        with pytest.raises(ValidationError):
            delivery.confirm_delivered(confirmed_by="buyer-1")

    def test_confirmed_is_terminal(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.SELLER)
        delivery.confirm_delivered(confirmed_by="seller-1")
        with pytest.raises(ValidationError):
            delivery.confirm_delivered(confirmed_by="seller-1")

    def test_is_held_by(self):
        delivery = Delivery.assign("ord-1", DeliveryMethod.CONTRACTED, courier_id="courier-c")
        assert delivery.is_held_by("courier-c")
        assert not delivery.is_held_by("courier-a")
        assert not Delivery.request("ord-2").is_held_by(None)
