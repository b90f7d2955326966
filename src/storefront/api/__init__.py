"""Storefront HTTP API package."""

from storefront.api.errors import install_error_handlers
from storefront.api.routes import cart_router, favorites_router, order_router, product_router, promotion_router

__all__ = [
    "product_router",
    "promotion_router",
    "cart_router",
    "order_router",
    "favorites_router",
    "install_error_handlers",
]
