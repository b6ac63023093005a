"""Storefront API package."""

from storefront.api.routes import cart_router, order_router, storage_fault_handler, user_router

__all__ = ["order_router", "user_router", "cart_router", "storage_fault_handler"]
