import itertools

import pytest

from shop_catalog.services.catalog_items import CatalogItem, DraftIdentity
from shop_catalog.services.catalog_query import (
    PriceBand,
    QueryState,
    SearchSurface,
    SortDirection,
    SortKey,
    apply_query,
    filter_items,
    iter_pages,
    paginate,
    select_items,
    sort_items,
    summarize,
)

_keys = itertools.count(1)


def make_item(name: str, **fields) -> CatalogItem:
    values = {
        "sku": f"SKU-{name.upper()}",
        "category": "Other",
        "price": 1.0,
        "stock": 1,
        "image": "https://images.example.com/item.jpg",
        "location": "Aisle 1",
        "directions": "Straight ahead",
        "description": "",
        "created_at": 1_000,
        "updated_at": 1_000,
    }
    values.update(fields)
    return CatalogItem(identity=DraftIdentity(local_key=next(_keys)), name=name, **values)


@pytest.fixture
def abc_items() -> list[CatalogItem]:
    return [
        make_item("A", price=5, stock=3, created_at=1),
        make_item("B", price=50, stock=20, created_at=2),
        make_item("C", price=5, stock=0, created_at=3),
    ]


@pytest.fixture
def catalog_items() -> list[CatalogItem]:
    return [
        make_item("Organic Apples", sku="APL-ORG-001", category="Produce", price=3.99,
                  stock=120, location="Aisle 2", description="Crisp apples", created_at=10),
        make_item("Sourdough", sku="BRD-SRD-014", category="Bakery", price=2.5,
                  stock=45, location="Bakery", description="Daily baked", created_at=20),
        make_item("Headphones", sku="EL-HP-9", category="Electronics", price=1999,
                  stock=4, location="Aisle 9", description="Wireless audio", created_at=30),
        make_item("Television", sku="EL-TV-1", category="Electronics", price=4500,
                  stock=2, location="Aisle 9", description="Big screen", created_at=40),
    ]


def names(items) -> list[str]:
    return [item.name for item in items]


def test_price_sort_ascending_puts_ties_before_b(abc_items):
    ordered = sort_items(abc_items, SortKey.price, SortDirection.asc)
    assert names(ordered)[2] == "B"
    assert set(names(ordered)[:2]) == {"A", "C"}


def test_price_sort_descending_is_reverse_order_of_keys(abc_items):
    ordered = sort_items(abc_items, SortKey.price, SortDirection.desc)
    assert names(ordered)[0] == "B"
    assert set(names(ordered)[1:]) == {"A", "C"}


def test_ties_keep_incoming_order(abc_items):
    assert names(sort_items(abc_items, "price", "asc")) == ["A", "C", "B"]
    assert names(sort_items(abc_items, "price", "desc")) == ["B", "A", "C"]


def test_default_sort_is_newest_first(abc_items):
    assert names(sort_items(abc_items)) == ["C", "B", "A"]


def test_name_sort_is_case_sensitive():
    items = [make_item("banana"), make_item("Apple"), make_item("Cherry")]
    assert names(sort_items(items, "name", "asc")) == ["Apple", "Cherry", "banana"]


def test_all_band_keeps_everything(abc_items):
    state = QueryState(category="all", price_band="0-1000")
    assert names(filter_items(abc_items, state)) == ["A", "B", "C"]


@pytest.mark.parametrize(
    "surface, text, expected",
    [
        (SearchSurface.dashboard, "apl-org", ["Organic Apples"]),
        (SearchSurface.storefront, "apl-org", []),
        (SearchSurface.storefront, "WIRELESS", ["Headphones"]),
        (SearchSurface.dashboard, "wireless", []),
        (SearchSurface.dashboard, "aisle 9", ["Headphones", "Television"]),
        (SearchSurface.dashboard, "bakery", ["Sourdough"]),
        (SearchSurface.dashboard, "   ", ["Organic Apples", "Sourdough", "Headphones", "Television"]),
    ],
)
def test_text_filter_fields_depend_on_surface(catalog_items, surface, text, expected):
    state = QueryState(text=text, surface=surface)
    assert names(filter_items(catalog_items, state)) == expected


@pytest.mark.parametrize("category", ["all", "All"])
def test_all_category_passes_everything(catalog_items, category):
    assert len(filter_items(catalog_items, QueryState(category=category))) == 4


def test_category_filter_is_exact(catalog_items):
    state = QueryState(category="Electronics")
    assert names(filter_items(catalog_items, state)) == ["Headphones", "Television"]
    assert filter_items(catalog_items, QueryState(category="electronics")) == []


@pytest.mark.parametrize(
    "band, expected",
    [
        ("0-1000", ["Organic Apples", "Sourdough"]),
        ("1000-2000", ["Headphones"]),
        ("2000-4000", []),
        ("4000+", ["Television"]),
    ],
)
def test_price_bands(catalog_items, band, expected):
    state = QueryState(price_band=band, surface=SearchSurface.storefront)
    assert names(filter_items(catalog_items, state)) == expected


def test_price_band_bounds_are_inclusive():
    band = PriceBand.parse("1000-2000")
    assert band.contains(1000) and band.contains(2000)
    assert not band.contains(2000.01)
    assert PriceBand.parse("4000+").contains(4000)
    assert PriceBand.parse("all") is None


@pytest.mark.parametrize("band", ["cheap", "10-", "50-10"])
def test_bad_price_band_is_rejected(band):
    with pytest.raises(ValueError):
        QueryState(price_band=band)


def test_filtering_is_idempotent_and_pure(catalog_items):
    snapshot = list(catalog_items)
    state = QueryState(text="aisle", sort_by="price", sort_dir="asc")
    first = select_items(catalog_items, state)
    second = select_items(catalog_items, state)
    assert first == second
    assert catalog_items == snapshot


@pytest.mark.parametrize("count", [0, 1, 5, 6, 7, 24, 25])
@pytest.mark.parametrize("page_size", [6, 9, 12, 24])
def test_pages_reassemble_the_list(count, page_size):
    items = [make_item(f"P{i}", created_at=i) for i in range(count)]
    ordered = sort_items(items)
    pages = list(iter_pages(ordered, page_size))
    assert len(pages) == -(-count // page_size)
    assert [item for page in pages for item in page] == ordered


def test_page_past_the_end_clamps_to_first(catalog_items):
    result = paginate(catalog_items, page=5, page_size=2)
    assert result.page == 1
    assert result.total_pages == 2
    assert names(result.items) == ["Organic Apples", "Sourdough"]


def test_empty_list_has_one_empty_page():
    result = paginate([], page=1, page_size=6)
    assert result.total_pages == 1
    assert result.items == []
    assert not result.has_next


def test_apply_query_pages_the_sorted_list(catalog_items):
    state = QueryState(sort_by="price", sort_dir="desc", page=2, page_size=3)
    result = apply_query(catalog_items, state)
    assert result.total_items == 4
    assert names(result.items) == ["Sourdough"]
    assert result.has_previous


def test_summary(catalog_items):
    summary = summarize(catalog_items)
    assert summary.total_products == 4
    assert summary.low_stock == sum(1 for item in catalog_items if item.stock < 10)
    assert summary.low_stock == 2
    assert summary.average_price == round((3.99 + 2.5 + 1999 + 4500) / 4, 2)
    assert summary.inventory_value == round(3.99 * 120 + 2.5 * 45 + 1999 * 4 + 4500 * 2, 2)


def test_summary_of_empty_catalog():
    summary = summarize([])
    assert summary.total_products == 0
    assert summary.average_price == 0.0
    assert summary.inventory_value == 0.0


def test_name_sort_tolerates_nul_characters():
    items = [make_item("c"), make_item("a\x00b")]
    assert names(sort_items(items, "name", "asc")) == ["a\x00b", "c"]
    assert names(sort_items(items, "name", "desc")) == ["c", "a\x00b"]
