"""View models for the two screens that read the catalog.

Each view keeps its own query state and reads the shared CatalogSession; neither
talks to the API directly.
"""

from __future__ import annotations

from typing import Any

from shop_catalog.api.schemas.product import CATEGORIES
from shop_catalog.services.catalog_items import CatalogItem
from shop_catalog.services.catalog_query import (
    CatalogSummary,
    Page,
    PRICE_BANDS,
    QueryState,
    SearchSurface,
    SortDirection,
    apply_query,
    filter_items,
    summarize,
)
from shop_catalog.services.catalog_session import CatalogSession, DeleteOutcome


class ProductSearchView:
    """Storefront search: text, category and price band, no paging."""

    categories = ("all", *CATEGORIES)
    price_bands = PRICE_BANDS

    def __init__(self, session: CatalogSession):
        self.session = session
        self.state = QueryState(surface=SearchSurface.storefront, category="all")

    def search(self, **changes: Any) -> list[CatalogItem]:
        """Update any of ``text``, ``category`` or ``price_band`` and return matches."""
        if changes:
            band = changes.get("price_band")
            if band is not None and band not in self.price_bands:
                raise ValueError(f"Unknown price band: {band}")
            self.state = QueryState.model_validate(
                {**self.state.model_dump(), **changes}
            )
        return self.results()

    def results(self) -> list[CatalogItem]:
        return filter_items(self.session.products, self.state)


class DashboardView:
    """Owner dashboard product table with sort, paging, selection and summary."""

    def __init__(self, session: CatalogSession, page_size: int = 6):
        self.session = session
        self.state = QueryState(category="All", page_size=page_size)

    def update(self, **changes: Any) -> Page[CatalogItem]:
        self.state = QueryState.model_validate({**self.state.model_dump(), **changes})
        return self.page()

    def set_page_size(self, page_size: int) -> Page[CatalogItem]:
        return self.update(page_size=page_size, page=1)

    def toggle_sort_direction(self) -> Page[CatalogItem]:
        flipped = (
            SortDirection.desc
            if self.state.sort_dir is SortDirection.asc
            else SortDirection.asc
        )
        return self.update(sort_dir=flipped)

    def page(self) -> Page[CatalogItem]:
        result = apply_query(self.session.products, self.state)
        if result.page != self.state.page:
            # The list shrank under the current page; remember the reset
            self.state = self.state.model_copy(update={"page": result.page})
        return result

    def summary(self) -> CatalogSummary:
        return summarize(self.session.products, self.session.low_stock_threshold)

    def toggle_selected(self, local_key: int) -> None:
        selected = self.session.selected
        if local_key in selected:
            selected.discard(local_key)
        else:
            selected.add(local_key)

    def toggle_page_selection(self) -> None:
        """Select every row on the current page, or clear them if all are selected."""
        keys = {item.local_key for item in self.page().items}
        if keys and keys <= self.session.selected:
            self.session.selected -= keys
        else:
            self.session.selected |= keys

    async def delete_selected(self) -> list[DeleteOutcome]:
        return await self.session.delete_many()
