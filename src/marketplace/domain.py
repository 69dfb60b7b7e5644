"""Marketplace bounded context — Order Fulfillment Core.

Turns a cart into a priced, stock-reserved order, drives the order through
delivery (marketplace courier, contracted courier or seller self-delivery),
and settles the seller's earnings once delivery is confirmed.
"""

import structlog
from protean.domain import Domain

from marketplace.utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
