"""Payment confirmation — command and handler.

Driven by the payment provider's notification once the buyer has paid.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_reference = String(required=True, max_length=255)


@marketplace.command_handler(part_of=Order)
class PaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm_payment(command.payment_reference)
        repo.add(order)
