"""Courier registration — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.courier.courier import Courier
from marketplace.domain import marketplace


@marketplace.command(part_of="Courier")
class RegisterCourier:
    courier_id = Identifier()
    name = String(required=True, max_length=255)
    phone = String(max_length=50)


@marketplace.command_handler(part_of=Courier)
class RegisterCourierHandler:
    @handle(RegisterCourier)
    def register_courier(self, command):
        courier = Courier.register(
            name=command.name,
            phone=command.phone,
            courier_id=command.courier_id,
        )
        current_domain.repository_for(Courier).add(courier)
        return str(courier.id)
