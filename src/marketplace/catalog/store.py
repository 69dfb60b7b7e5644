"""Store aggregate (CQRS) — the seller-owned storefront.

The store carries the seller's payment-provider credential, an optional
contracted courier, and the seller's pending balance. The balance only ever
grows here: it is credited by settlement once per completed order.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from marketplace.catalog.events import CourierContracted, SellerCredited, StoreOpened
from marketplace.domain import marketplace


@marketplace.aggregate
class Store:
    name = String(required=True, max_length=255)
    seller_id = Identifier(required=True)
    contracted_courier_id = Identifier()
    payment_credential = String(max_length=500)
    address_street = String(max_length=255)
    address_number = String(max_length=50)
    pending_balance = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, name, seller_id, payment_credential=None, address_street=None, address_number=None):
        now = datetime.now(UTC)
        store = cls(
            name=name,
            seller_id=seller_id,
            payment_credential=payment_credential,
            address_street=address_street,
            address_number=address_number,
            pending_balance=0.0,
            created_at=now,
            updated_at=now,
        )
        store.raise_(
            StoreOpened(
                store_id=str(store.id),
                seller_id=str(seller_id),
                name=name,
                opened_at=now,
            )
        )
        return store

    @property
    def display_address(self) -> str:
        return ", ".join(part for part in (self.address_street, self.address_number) if part)

    def is_owned_by(self, seller_id) -> bool:
        return str(self.seller_id) == str(seller_id)

    def contract_courier(self, courier_id):
        now = datetime.now(UTC)
        self.contracted_courier_id = courier_id
        self.updated_at = now
        self.raise_(
            CourierContracted(
                store_id=str(self.id),
                courier_id=str(courier_id),
                contracted_at=now,
            )
        )

    def credit(self, amount: float, order_id, marketplace_fee: float):
        """Add a settled order's earnings to the pending balance."""
        if amount < 0:
            raise ValidationError({"amount": ["Credited amount cannot be negative"]})

        now = datetime.now(UTC)
        self.pending_balance = round((self.pending_balance or 0.0) + amount, 2)
        self.updated_at = now
        self.raise_(
            SellerCredited(
                store_id=str(self.id),
                seller_id=str(self.seller_id),
                order_id=str(order_id),
                amount=amount,
                marketplace_fee=marketplace_fee,
                new_pending_balance=self.pending_balance,
                credited_at=now,
            )
        )
