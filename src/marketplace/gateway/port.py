"""Payment provider port (abstract interface).

Checkout talks to the provider only through this contract, so the fake
adapter used in development and tests can be swapped for a real provider
without touching order code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PreferenceResult:
    """A payment preference created at the provider for one order."""

    success: bool
    redirect_url: str | None = None
    reference: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment provider interface."""

    @abstractmethod
    def create_preference(
        self,
        order_id: str,
        amount: float,
        fee_amount: float,
        seller_credential: str,
        payer_email: str | None,
        title: str,
    ) -> PreferenceResult:
        """Create a checkout preference paid out to the seller's account.

        ``fee_amount`` is the platform's share, withheld by the provider.
        """
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Verify that a payment notification came from the provider."""
        ...
