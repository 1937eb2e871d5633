"""SQLAlchemy model for product records."""

import uuid

from sqlalchemy import BigInteger, Column, Float, Integer, String, Text

from shop_catalog.db.base import Base


class Product(Base):
    __tablename__ = "products"

    # Opaque server identity; the UI's numeric key never reaches this table
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=False)
    category = Column(String(32), nullable=False, default="Other")
    price = Column(Float, nullable=False, default=0.0)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(Text, nullable=False)
    location = Column(String(255), nullable=False, default="")
    directions = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    # Epoch milliseconds
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
