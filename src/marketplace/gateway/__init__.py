"""Payment provider factory.

``get_gateway()`` returns the adapter named by the ``PAYMENT_GATEWAY``
environment variable (only ``fake`` ships here); ``set_gateway()`` and
``reset_gateway()`` let tests swap it.
"""

import os

from marketplace.gateway.fake_adapter import FakeGateway
from marketplace.gateway.port import PaymentGateway

_ADAPTERS = {"fake": FakeGateway}

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, creating the configured one on first use."""
    global _current_gateway
    if _current_gateway is None:
        name = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
        if name not in _ADAPTERS:
            raise ValueError(f"Unknown payment gateway: {name}")
        _current_gateway = _ADAPTERS[name]()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
