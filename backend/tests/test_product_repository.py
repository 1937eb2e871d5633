import pytest

from shop_catalog.core.exceptions import NotFoundError
from shop_catalog.db.repositories.products import ProductRepository


@pytest.fixture
def repo(db_session_factory):
    db = db_session_factory()
    yield ProductRepository(db)
    db.close()


@pytest.fixture
def doc() -> dict:
    return {
        "name": "Fresh Sourdough Bread",
        "sku": "BRD-SRD-014",
        "category": "Bakery",
        "price": 2.5,
        "stock": 45,
        "image": "https://images.example.com/bread.jpg",
        "location": "Bakery",
        "directions": "Left from entrance, near the counter",
        "description": "",
    }


def test_create_assigns_unique_ids(repo, doc):
    first = repo.create(doc)
    second = repo.create(doc)
    assert first.id and second.id
    assert first.id != second.id
    assert len(repo.list()) == 2


def test_future_created_at_clamps_updated_at(repo, doc):
    future = 32_503_680_000_000  # year 3000
    product = repo.create({**doc, "created_at": future})
    assert product.created_at == future
    assert product.updated_at >= product.created_at


def test_update_missing_product_raises(repo, doc):
    with pytest.raises(NotFoundError) as excinfo:
        repo.update("missing", doc)
    assert excinfo.value.status_code == 404


def test_update_never_touches_created_at(repo, doc):
    product = repo.create(doc)
    created_at = product.created_at
    updated = repo.update(product.id, {**doc, "stock": 3, "created_at": 1})
    assert updated.stock == 3
    assert updated.created_at == created_at
    assert updated.updated_at >= created_at


def test_delete_is_idempotent(repo, doc):
    product = repo.create(doc)
    assert repo.delete(product.id) is True
    assert repo.delete(product.id) is False
    assert repo.list() == []
