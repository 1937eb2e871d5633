"""The client's working set of products and every write against it.

One CatalogSession is shared by the storefront search and the owner dashboard,
so both always read the same list. After each write or delete the session
re-fetches the full catalog rather than patching its copy. Failures never
escape: they are logged and turned into short-lived notices for the UI.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import deque
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from shop_catalog.core.config import Settings, get_settings
from shop_catalog.core.exceptions import CatalogError, NotFoundError, ValidationError
from shop_catalog.services.catalog_client import CatalogClient
from shop_catalog.services.catalog_items import CatalogItem, DraftIdentity
from shop_catalog.services.import_export import (
    coerce_import_record,
    dump_export,
    export_filename,
    is_importable,
    parse_import_json,
)
from shop_catalog.services.validation import normalize_draft
from shop_catalog.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000
MAX_NOTICES = 20

SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Organic Apples",
        "sku": "APL-ORG-001",
        "category": "Produce",
        "price": 3.99,
        "stock": 120,
        "image": "https://images.unsplash.com/photo-1567306226416-28f0efdc88ce?w=800&q=80&auto=format&fit=crop",
        "location": "Aisle 2",
        "directions": "Go straight, second shelf on the right",
        "description": "Crisp, fresh, organically grown apples.",
        "age_days": (4, 2),
    },
    {
        "name": "Fresh Sourdough Bread",
        "sku": "BRD-SRD-014",
        "category": "Bakery",
        "price": 2.5,
        "stock": 45,
        "image": "https://images.unsplash.com/photo-1608198093002-ad4e0054842e?w=800&q=80&auto=format&fit=crop",
        "location": "Bakery",
        "directions": "Left from entrance, near the counter",
        "description": "Daily baked sourdough loaf with crisp crust.",
        "age_days": (3, 1),
    },
    {
        "name": "Whole Milk 1L",
        "sku": "MLK-WHL-1L",
        "category": "Dairy",
        "price": 1.99,
        "stock": 200,
        "image": "https://images.unsplash.com/photo-1550583724-b2692b85b150?w=800&q=80&auto=format&fit=crop",
        "location": "Refrigerated Aisle",
        "directions": "Back of store, second fridge on left",
        "description": "Rich and creamy whole milk.",
        "age_days": (5, 2),
    },
]


class Notice(BaseModel):
    message: str
    level: str = "info"


class DeleteOutcome(BaseModel):
    local_key: int
    server_key: str | None = None
    success: bool = True
    error: str | None = None


class ImportReport(BaseModel):
    received: int = 0
    skipped: int = 0
    created: int = 0
    failures: list[str] = []


class CatalogSession:
    """Owns the fetch / write / re-fetch cycle for the product working set."""

    def __init__(self, client: CatalogClient, settings: Settings | None = None):
        settings = settings or get_settings()
        self.client = client
        self.placeholder_image = settings.placeholder_image_url
        self.low_stock_threshold = settings.low_stock_threshold

        self.products: list[CatalogItem] = []
        self.selected: set[int] = set()
        self.notices: deque[Notice] = deque(maxlen=MAX_NOTICES)
        self.using_sample_data = False
        self._bootstrapped = False
        self._key_counter = itertools.count(1)
        self._local_keys: dict[str, int] = {}

    # -- notices and lookups -------------------------------------------------

    def notify(self, message: str, level: str = "info") -> None:
        log = logger.warning if level in ("warning", "error") else logger.info
        log(f"Catalog notice: {message}")
        self.notices.append(Notice(message=message, level=level))

    @property
    def last_notice(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def next_local_key(self) -> int:
        return next(self._key_counter)

    def _local_key_for(self, server_key: str) -> int:
        # Local keys stay stable across re-fetches so selections survive them
        if server_key not in self._local_keys:
            self._local_keys[server_key] = self.next_local_key()
        return self._local_keys[server_key]

    def find(self, local_key: int) -> CatalogItem | None:
        for item in self.products:
            if item.local_key == local_key:
                return item
        return None

    def find_by_server_key(self, server_key: str) -> CatalogItem | None:
        for item in self.products:
            if item.server_key == server_key:
                return item
        return None

    def _sample_items(self) -> list[CatalogItem]:
        now = now_ms()
        items = []
        for sample in SAMPLE_PRODUCTS:
            created_days, updated_days = sample["age_days"]
            fields = {k: v for k, v in sample.items() if k != "age_days"}
            items.append(
                CatalogItem(
                    identity=DraftIdentity(local_key=self.next_local_key()),
                    created_at=now - DAY_MS * created_days,
                    updated_at=now - DAY_MS * updated_days,
                    **fields,
                )
            )
        return items

    def _remove_local(self, local_keys: Iterable[int]) -> None:
        doomed = set(local_keys)
        self.products = [p for p in self.products if p.local_key not in doomed]
        self.selected -= doomed

    # -- reads ---------------------------------------------------------------

    async def fetch_all(self) -> bool:
        """Replace the working set with the server's full list.

        The first failed load falls back to the built-in sample products; any
        later failure keeps the current list as it is.
        """
        try:
            documents = await self.client.list_products()
        except CatalogError as e:
            logger.error(f"Failed to fetch products: {e.detail}")
            if not self._bootstrapped:
                self.products = self._sample_items()
                self.using_sample_data = True
                self.notify("Using sample data (API unavailable)", "warning")
            else:
                self.notify("Could not refresh products from server", "error")
            self._bootstrapped = True
            return False

        self.products = [
            CatalogItem.from_document(doc, self._local_key_for(doc.server_id))
            for doc in documents
        ]
        live = {item.server_key for item in self.products}
        self._local_keys = {k: v for k, v in self._local_keys.items() if k in live}
        self.selected &= {item.local_key for item in self.products}
        self.using_sample_data = False
        self._bootstrapped = True
        logger.debug(f"Fetched {len(self.products)} products")
        return True

    # -- writes --------------------------------------------------------------

    async def save(
        self,
        draft: Mapping[str, Any],
        editing_key: int | None = None,
    ) -> CatalogItem | None:
        """Create or update a product from a form draft.

        Updates target the edited item's server key; an edited item that was
        never persisted is created instead. Returns the stored item, or None
        when validation or the server rejected the write. A rejected write
        leaves the working set untouched.
        """
        try:
            body = normalize_draft(draft, self.placeholder_image)
        except ValidationError as e:
            self.notify(e.detail, "error")
            return None

        editing = self.find(editing_key) if editing_key is not None else None
        now = now_ms()
        body["createdAt"] = editing.created_at if editing else now
        body["updatedAt"] = now

        try:
            if editing is not None and editing.is_persisted:
                document = await self.client.update_product(editing.server_key, body)
                message = "Product updated"
            else:
                document = await self.client.create_product(body)
                message = "Product added"
        except NotFoundError as e:
            self.notify(e.detail, "error")
            return None
        except CatalogError as e:
            logger.error(f"Saving product failed: {e.detail}")
            self.notify("Server error. Please check backend.", "error")
            return None

        if editing is not None and not editing.is_persisted:
            # Draft -> persisted: keep the key the UI already knows
            self._local_keys[document.server_id] = editing.local_key
        self.notify(message)

        await self.fetch_all()
        saved = self.find_by_server_key(document.server_id)
        if saved is None:
            saved = CatalogItem.from_document(
                document, self._local_key_for(document.server_id)
            )
        return saved

    async def _delete_remote(self, item: CatalogItem | None, local_key: int) -> DeleteOutcome:
        if item is None or not item.is_persisted:
            return DeleteOutcome(local_key=local_key)
        try:
            await self.client.delete_product(item.server_key)
        except CatalogError as e:
            logger.error(f"Deleting product {item.server_key} failed: {e.detail}")
            return DeleteOutcome(
                local_key=local_key,
                server_key=item.server_key,
                success=False,
                error=e.detail,
            )
        return DeleteOutcome(local_key=local_key, server_key=item.server_key)

    async def delete_one(self, local_key: int) -> DeleteOutcome:
        """Delete one product, removing it locally whatever the server says.

        Items that were never persisted are removed locally without any request.
        Otherwise the list is re-fetched, so a failed delete shows up again.
        """
        item = self.find(local_key)
        outcome = await self._delete_remote(item, local_key)
        if outcome.success:
            self.notify("Product deleted")
        else:
            self.notify("Server error. Could not delete", "error")

        self._remove_local([local_key])
        if outcome.server_key is not None:
            await self.fetch_all()
        return outcome

    async def delete_many(self, local_keys: Iterable[int] | None = None) -> list[DeleteOutcome]:
        """Delete several products concurrently and report each outcome.

        Defaults to the current selection. The selection is cleared afterwards.
        """
        keys = list(local_keys) if local_keys is not None else sorted(self.selected)
        if not keys:
            return []

        outcomes = await asyncio.gather(
            *(self._delete_remote(self.find(key), key) for key in keys)
        )
        failed = [o for o in outcomes if not o.success]
        if failed:
            self.notify(
                f"Server error. {len(failed)} of {len(outcomes)} items may remain.",
                "error",
            )
        else:
            self.notify("Selected products deleted")

        self._remove_local(keys)
        self.selected.clear()
        if any(o.server_key is not None for o in outcomes):
            await self.fetch_all()
        return list(outcomes)

    async def _create_quiet(self, body: dict[str, Any]) -> str | None:
        try:
            await self.client.create_product(body)
        except CatalogError as e:
            logger.error(f"Importing product {body.get('sku') or body.get('name')} failed: {e.detail}")
            return f"{body.get('sku') or body.get('name')}: {e.detail}"
        return None

    async def import_batch(self, records: list[Any]) -> ImportReport:
        """Create one product per usable record, then re-fetch.

        Records without a name and a SKU are skipped. No duplicate detection
        is done against the existing catalog.
        """
        now = now_ms()
        report = ImportReport(received=len(records))
        bodies = []
        for record in records:
            if not is_importable(record):
                report.skipped += 1
                continue
            bodies.append(coerce_import_record(record, self.placeholder_image, now))

        errors = await asyncio.gather(*(self._create_quiet(body) for body in bodies))
        report.failures = [error for error in errors if error is not None]
        report.created = len(bodies) - len(report.failures)

        await self.fetch_all()
        if report.failures:
            self.notify(
                f"Imported {report.created} products, {len(report.failures)} failed",
                "warning",
            )
        else:
            self.notify("Products imported")
        return report

    async def import_json(self, text: str | bytes) -> ImportReport | None:
        try:
            records = parse_import_json(text)
        except ValidationError as e:
            self.notify(e.detail, "error")
            return None
        return await self.import_batch(records)

    def export_all(self) -> str:
        """Snapshot of the working set as it is now, not re-read from the server."""
        return dump_export(self.products)

    def export_to(self, directory: Path, on: date | None = None) -> Path:
        path = Path(directory) / export_filename(on)
        path.write_text(self.export_all(), encoding="utf-8")
        logger.info(f"Exported {len(self.products)} products to {path}")
        return path
