"""Business logic for deriving display lists from the full product set.

Both the storefront search and the owner dashboard fetch the whole catalog and
run it through these functions. Every function returns new lists and leaves the
input untouched, so the same query state over the same list always yields the
same result.
"""

from __future__ import annotations

import locale
import math
from enum import Enum
from typing import Any, Generic, Iterable, Iterator, Sequence, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")

ALL_CATEGORIES = ("all", "All")
DASHBOARD_PAGE_SIZES = (6, 9, 12, 24)
PRICE_BANDS = ("all", "0-1000", "1000-2000", "2000-4000", "4000+")


class SortKey(str, Enum):
    created_at = "createdAt"
    price = "price"
    stock = "stock"
    name = "name"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class SearchSurface(str, Enum):
    """Which screen is searching; each one matches text against different fields."""

    dashboard = "dashboard"
    storefront = "storefront"


SURFACE_FIELDS = {
    SearchSurface.dashboard: ("name", "sku", "category", "location"),
    SearchSurface.storefront: ("name", "description", "category", "location"),
}

SORT_ATTRIBUTES = {
    SortKey.created_at: "created_at",
    SortKey.price: "price",
    SortKey.stock: "stock",
    SortKey.name: "name",
}


class PriceBand(BaseModel):
    """Inclusive ``low..high`` band, or open-ended ``low+`` when high is None."""

    low: float
    high: float | None = None

    @classmethod
    def parse(cls, value: str) -> "PriceBand | None":
        """Parse ``"0-1000"`` or ``"4000+"``. ``"all"`` means no band."""
        text = value.strip()
        if text.lower() == "all" or not text:
            return None
        try:
            if text.endswith("+"):
                return cls(low=float(text[:-1]))
            low, high = text.split("-", 1)
            band = cls(low=float(low), high=float(high))
        except ValueError as e:
            raise ValueError(f"Unrecognized price band: {value!r}") from e
        if band.high < band.low:
            raise ValueError(f"Price band {value!r} has its bounds reversed")
        return band

    def contains(self, price: float) -> bool:
        if self.high is None:
            return price >= self.low
        return self.low <= price <= self.high


class QueryState(BaseModel):
    text: str = ""
    category: str = "all"
    price_band: str = "all"
    sort_by: SortKey = SortKey.created_at
    sort_dir: SortDirection = SortDirection.desc
    page: int = Field(1, ge=1)
    page_size: int = Field(DASHBOARD_PAGE_SIZES[0], ge=1)
    surface: SearchSurface = SearchSurface.dashboard

    @field_validator("price_band")
    @classmethod
    def check_price_band(cls, v: str) -> str:
        PriceBand.parse(v)
        return v


class Page(BaseModel, Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class CatalogSummary(BaseModel):
    total_products: int
    low_stock: int
    average_price: float
    inventory_value: float


def matches_text(item: Any, query: str, surface: SearchSurface) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    for field in SURFACE_FIELDS[surface]:
        value = getattr(item, field, None) or ""
        if needle in str(value).lower():
            return True
    return False


def filter_items(items: Iterable[T], state: QueryState) -> list[T]:
    """Apply text, category and price band filters (combined with AND)."""
    band = PriceBand.parse(state.price_band)
    result = []
    for item in items:
        if not matches_text(item, state.text, state.surface):
            continue
        if state.category not in ALL_CATEGORIES and item.category != state.category:
            continue
        if band is not None and not band.contains(item.price):
            continue
        result.append(item)
    return result


def sort_items(
    items: Iterable[T],
    sort_by: SortKey = SortKey.created_at,
    sort_dir: SortDirection = SortDirection.desc,
) -> list[T]:
    """Sort on a single key. Equal keys keep their incoming order either way."""
    attribute = SORT_ATTRIBUTES[SortKey(sort_by)]

    def key(item: Any) -> Any:
        value = getattr(item, attribute)
        if isinstance(value, str):
            # strxfrm rejects embedded NUL characters
            return locale.strxfrm(value.replace("\x00", ""))
        return value

    return sorted(items, key=key, reverse=SortDirection(sort_dir) is SortDirection.desc)


def count_pages(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return math.ceil(total_items / page_size)


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice one page out of ``items``.

    There is always at least one (possibly empty) page. A page past the end,
    e.g. after deletions shrank the list, falls back to page 1.
    """
    total_pages = max(1, count_pages(len(items), page_size))
    if page > total_pages or page < 1:
        page = 1
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(items),
        total_pages=total_pages,
    )


def iter_pages(items: Sequence[T], page_size: int) -> Iterator[list[T]]:
    """Yield every non-empty page in order."""
    for index in range(count_pages(len(items), page_size)):
        yield list(items[index * page_size : (index + 1) * page_size])


def select_items(items: Iterable[T], state: QueryState) -> list[T]:
    """Filter then sort, without paging."""
    return sort_items(filter_items(items, state), state.sort_by, state.sort_dir)


def apply_query(items: Iterable[T], state: QueryState) -> Page[T]:
    return paginate(select_items(items, state), state.page, state.page_size)


def summarize(items: Sequence[Any], low_stock_threshold: int = 10) -> CatalogSummary:
    """Dashboard headline numbers over the full, unfiltered set."""
    total = len(items)
    average = sum(item.price for item in items) / total if total else 0.0
    return CatalogSummary(
        total_products=total,
        low_stock=sum(1 for item in items if item.stock < low_stock_threshold),
        average_price=round(average, 2),
        inventory_value=round(sum(item.price * item.stock for item in items), 2),
    )
