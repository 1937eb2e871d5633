"""CRUD endpoints for the product catalog.

The API serves the whole collection; searching, sorting and paging happen in
the catalog query engine on the consumer side.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shop_catalog.api.dependencies.db import get_session
from shop_catalog.api.schemas.product import (
    DeleteAck,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from shop_catalog.core.config import get_settings
from shop_catalog.core.exceptions import CatalogError
from shop_catalog.db.repositories.products import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_document(payload: ProductCreate | ProductUpdate) -> dict:
    doc = payload.model_dump()
    doc["image"] = payload.image or get_settings().placeholder_image_url
    return doc


@router.get(
    "",
    summary="List all products",
    response_model=list[ProductRead],
)
async def list_products(db: Session = Depends(get_session)) -> list[ProductRead]:
    """Return every product document; no filtering or paging is done here."""
    try:
        products = ProductRepository(db).list()
        return [ProductRead.model_validate(p) for p in products]
    except SQLAlchemyError as e:
        logger.error(f"Database error listing products: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve products",
        ) from e


@router.post(
    "",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductRead,
)
async def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_session),
) -> ProductRead:
    """Persist a product and return it with its assigned identity and timestamps."""
    try:
        product = ProductRepository(db).create(_to_document(payload))
        return ProductRead.model_validate(product)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error creating product: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product",
        ) from e
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating product: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.put(
    "/{product_id}",
    summary="Replace an existing product",
    response_model=ProductRead,
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    db: Session = Depends(get_session),
) -> ProductRead:
    """Full replacement of a product's fields.

    Unknown ids raise NotFoundError, which the exception handler turns into 404.
    """
    try:
        product = ProductRepository(db).update(product_id, _to_document(payload))
        return ProductRead.model_validate(product)
    except CatalogError:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Database error updating product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product",
        ) from e
    except Exception as e:
        db.rollback()
        logger.error(
            f"Unexpected error updating product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.delete(
    "/{product_id}",
    summary="Delete a product",
    response_model=DeleteAck,
)
async def delete_product(
    product_id: str,
    db: Session = Depends(get_session),
) -> DeleteAck:
    """Hard delete. Deleting an id that does not exist still succeeds."""
    try:
        ProductRepository(db).delete(product_id)
        return DeleteAck()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Database error deleting product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product",
        ) from e
