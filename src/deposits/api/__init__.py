"""Deposits domain API package."""

from deposits.api.routes import item_fulfillment_router

__all__ = ["item_fulfillment_router"]
