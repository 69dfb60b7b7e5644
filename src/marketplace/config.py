"""Platform-wide business settings for the marketplace core.

Every rate and fallback the core depends on is defined here exactly once and
read from the environment at import time. Modules import these names instead
of keeping their own copies.
"""

import os
from decimal import Decimal

# Share of each settled order kept by the platform.
MARKETPLACE_FEE_RATE = Decimal(os.environ.get("MARKETPLACE_FEE_RATE", "0.08"))

# Shipping charged per store when no city-specific option applies.
DEFAULT_SHIPPING_COST = Decimal(os.environ.get("DEFAULT_SHIPPING_COST", "5.00"))

CONFIRMATION_CODE_LENGTH = int(os.environ.get("CONFIRMATION_CODE_LENGTH", "6"))
CODE_GENERATION_ATTEMPTS = int(os.environ.get("CODE_GENERATION_ATTEMPTS", "5"))
STOCK_RESERVATION_ATTEMPTS = int(os.environ.get("STOCK_RESERVATION_ATTEMPTS", "3"))

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")


def fee_rate_percent() -> float:
    """The canonical fee rate as a percentage, for display."""
    return float(MARKETPLACE_FEE_RATE * 100)
