"""Product record store: persistence of product rows keyed by server identity.

The store assigns identity and timestamps and nothing else. Field validation
happens before a write gets here.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shop_catalog.core.exceptions import NotFoundError
from shop_catalog.db.models.product import Product
from shop_catalog.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    "name",
    "sku",
    "category",
    "price",
    "stock",
    "image",
    "location",
    "directions",
    "description",
)


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[Product]:
        """Return every product. Ordering is left to the caller."""
        return list(self.db.scalars(select(Product)).all())

    def get(self, product_id: str) -> Product | None:
        return self.db.get(Product, product_id)

    def create(self, doc: dict[str, Any]) -> Product:
        """Persist a new product with a fresh identity.

        A ``created_at`` already present in ``doc`` (e.g. from an imported
        snapshot) is kept; otherwise both timestamps are set to now.
        """
        timestamp = now_ms()
        created_at = doc.get("created_at") or timestamp
        product = Product(**{field: doc[field] for field in MUTABLE_FIELDS if field in doc})
        product.created_at = created_at
        product.updated_at = max(timestamp, created_at)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Created product {product.id} with SKU {product.sku}")
        return product

    def update(self, product_id: str, doc: dict[str, Any]) -> Product:
        """Replace the mutable fields of an existing product.

        Identity and ``created_at`` are never touched; ``updated_at`` is bumped.
        """
        product = self.get(product_id)
        if product is None:
            raise NotFoundError(product_id)

        for field in MUTABLE_FIELDS:
            if field in doc:
                setattr(product, field, doc[field])
        product.updated_at = max(now_ms(), product.created_at, product.updated_at)

        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Updated product {product_id}")
        return product

    def delete(self, product_id: str) -> bool:
        """Remove a product. Returns False when there was nothing to delete."""
        product = self.get(product_id)
        if product is None:
            logger.info(f"Delete of unknown product {product_id} ignored")
            return False
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Deleted product {product_id}")
        return True
