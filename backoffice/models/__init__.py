"""
Back-Office SQLAlchemy Models
"""

# Import all models to ensure they are registered with SQLAlchemy
from .user import User
from .store import Store
from .product import Product
from .stock import StockLog, StockTransaction
from .immutability import register_immutability_listeners

register_immutability_listeners()

__all__ = [
    "User",
    "Store",
    "Product",
    "StockLog",
    "StockTransaction",
    "register_immutability_listeners",
]
