"""Marketplace API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import cart_router, delivery_router, order_router, store_router

__all__ = ["cart_router", "order_router", "delivery_router", "store_router", "register_error_handlers"]
