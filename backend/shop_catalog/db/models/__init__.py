"""Database models package."""
from shop_catalog.db.models.product import Product

__all__ = ["Product"]
