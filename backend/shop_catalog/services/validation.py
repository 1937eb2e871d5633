"""Pre-flight validation and normalization of product drafts.

A draft is what an edit form holds: mostly strings, possibly numbers. Rules are
checked in a fixed order and the first failure wins; only that one message is
surfaced.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from shop_catalog.api.schemas.product import coerce_category
from shop_catalog.core.exceptions import ValidationError


def _text(draft: Mapping[str, Any], key: str) -> str:
    value = draft.get(key)
    if value is None:
        return ""
    return str(value).strip()


def parse_number(value: Any) -> float | None:
    """Parse a price-like value. Returns None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_whole_number(value: Any) -> int | None:
    """Parse a stock-like value. Returns None unless it is an integral number."""
    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def validate_draft(draft: Mapping[str, Any]) -> None:
    """Raise ValidationError for the first rule the draft breaks.

    Order: name, sku, price, stock, location, directions.
    """
    if not _text(draft, "name"):
        raise ValidationError("Product name is required", field="name")
    if not _text(draft, "sku"):
        raise ValidationError("SKU is required", field="sku")

    price = parse_number(draft.get("price"))
    if price is None:
        raise ValidationError("Price must be a number", field="price")
    if price < 0:
        raise ValidationError("Price cannot be negative", field="price")

    stock = parse_whole_number(draft.get("stock"))
    if stock is None:
        raise ValidationError("Stock must be a number", field="stock")
    if stock < 0:
        raise ValidationError("Stock cannot be negative", field="stock")

    if not _text(draft, "location"):
        raise ValidationError("Location is required", field="location")
    if not _text(draft, "directions"):
        raise ValidationError("Directions are required", field="directions")


def normalize_draft(draft: Mapping[str, Any], placeholder_image: str) -> dict[str, Any]:
    """Validate a draft and return the product body to send to the API."""
    validate_draft(draft)
    return {
        "name": _text(draft, "name"),
        "sku": _text(draft, "sku"),
        "category": coerce_category(draft.get("category")),
        "price": parse_number(draft.get("price")),
        "stock": parse_whole_number(draft.get("stock")),
        "image": _text(draft, "image") or placeholder_image,
        "location": _text(draft, "location"),
        "directions": _text(draft, "directions"),
        "description": _text(draft, "description"),
    }
