"""Storefront API package."""

from storefront.api.errors import register_all_exceptions
from storefront.api.routes import admin_router, cart_router, maintenance_router, order_router, product_router

__all__ = [
    "admin_router",
    "cart_router",
    "maintenance_router",
    "order_router",
    "product_router",
    "register_all_exceptions",
]
