"""
Data models for the order portal.

This module contains dataclasses for:
- Product / DashboardStats: Catalog data fetched from the portal API
- Order / OrderItem / OrderStatus: Submitted purchase orders
- User / UserRole: Signed-in account and its access role
- CatalogSelection / ProductSelection: Customer's in-progress order

API-facing models are frozen; only the selection model is mutable, since it
is edited on every quantity or color change.
"""

from .product import Product, DashboardStats, size_key
from .order import Order, OrderItem, OrderStatus
from .user import User, UserRole
from .selection import CatalogSelection, ProductSelection, parse_quantity

__all__ = [
    # Catalog models
    "Product",
    "DashboardStats",
    "size_key",
    # Order models
    "Order",
    "OrderItem",
    "OrderStatus",
    # User models
    "User",
    "UserRole",
    # Selection models
    "CatalogSelection",
    "ProductSelection",
    "parse_quantity",
]
