"""Configurable fake payment provider for development and testing.

No external calls are made. The adapter can be told to fail so tests can
exercise the checkout rollback path, and it records every call it receives.
"""

from uuid import uuid4

from marketplace.config import FRONTEND_URL
from marketplace.gateway.port import PaymentGateway, PreferenceResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment provider."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Provider unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Provider unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_preference(
        self,
        order_id: str,
        amount: float,
        fee_amount: float,
        seller_credential: str,
        payer_email: str | None,
        title: str,
    ) -> PreferenceResult:
        self.calls.append(
            {
                "method": "create_preference",
                "order_id": order_id,
                "amount": amount,
                "fee_amount": fee_amount,
                "seller_credential": seller_credential,
                "payer_email": payer_email,
                "title": title,
            }
        )

        if not self.should_succeed:
            return PreferenceResult(success=False, failure_reason=self.failure_reason)

        reference = f"fake_pref_{uuid4().hex[:12]}"
        return PreferenceResult(
            success=True,
            redirect_url=f"{FRONTEND_URL}/checkout/fake/{reference}?order_id={order_id}",
            reference=reference,
        )

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:  # noqa: ARG002
        return signature == "test-signature"
