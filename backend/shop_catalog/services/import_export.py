"""Parse catalog import files and build export snapshots."""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Iterable

from shop_catalog.api.schemas.product import coerce_category
from shop_catalog.core.exceptions import ValidationError
from shop_catalog.services.catalog_items import CatalogItem
from shop_catalog.services.validation import parse_number
from shop_catalog.utils.timestamps import in_range, now_ms


def parse_import_json(text: str | bytes) -> list[Any]:
    """Decode an import file. It must hold a JSON array."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ValidationError("Invalid JSON file") from e
    if not isinstance(data, list):
        raise ValidationError("Invalid JSON file")
    return data


def is_importable(record: Any) -> bool:
    """Records need at least a name or a SKU to be worth creating."""
    return isinstance(record, dict) and bool(record.get("name") or record.get("sku"))


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def coerce_import_record(
    record: dict[str, Any],
    placeholder_image: str,
    now: int | None = None,
) -> dict[str, Any]:
    """Fill in defaults and coerce types for one imported record.

    Unparseable numbers become 0. Identity fields in the record are ignored.
    A createdAt that is missing or outside the epoch-millisecond range becomes now.
    """
    now = now if now is not None else now_ms()
    price = parse_number(record.get("price")) or 0.0
    stock = parse_number(record.get("stock")) or 0
    created_at = parse_number(record.get("createdAt"))
    if created_at is None or not in_range(int(created_at)):
        created_at = now
    return {
        "name": _as_text(record.get("name")),
        "sku": _as_text(record.get("sku")),
        "category": coerce_category(record.get("category")),
        "price": price,
        "stock": int(stock),
        "image": _as_text(record.get("image")) or placeholder_image,
        "location": _as_text(record.get("location")),
        "directions": _as_text(record.get("directions")),
        "description": _as_text(record.get("description")),
        "createdAt": int(created_at),
        "updatedAt": now,
    }


def export_filename(on: date | None = None) -> str:
    return f"products-{(on or date.today()).isoformat()}.json"


def dump_export(items: Iterable[CatalogItem]) -> str:
    return json.dumps([item.to_export() for item in items], indent=2)
