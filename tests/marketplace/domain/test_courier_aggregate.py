"""Tests for the Courier aggregate and confirmation code generation."""

from marketplace.courier.courier import Courier, CourierAvailability
from marketplace.order.codes import CODE_ALPHABET, generate_code


class TestCourier:
    def test_registered_couriers_are_available(self):
        courier = Courier.register(name="Ana Entregas", phone="+55 11 90000-0001")
        assert courier.availability == CourierAvailability.AVAILABLE.value
        assert courier.is_available

    def test_user_id_doubles_as_courier_id(self):
        courier = Courier.register(name="Ana Entregas", courier_id="user-77")
        assert str(courier.id) == "user-77"

    def test_assigned_courier_is_not_available(self):
        courier = Courier.register(name="Ana Entregas")
        courier.availability = CourierAvailability.ASSIGNED.value
        assert not courier.is_available


class TestGenerateCode:
    def test_default_length_and_alphabet(self):
        code = generate_code()
        assert len(code) == 6
        assert all(ch in CODE_ALPHABET for ch in code)
        assert code == code.upper()

    def test_custom_length(self):
        assert len(generate_code(10)) == 10
