import os
from typing import Callable

import httpx
import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from shop_catalog.api.dependencies.db import get_session
from shop_catalog.db.session import build_engine, init_db
from shop_catalog.main import create_app
from shop_catalog.services.catalog_client import CatalogClient
from shop_catalog.services.catalog_session import CatalogSession

API_URL = "http://testserver/api/products"


class RecordingTransport(httpx.AsyncBaseTransport):
    """Routes requests into the ASGI app, recording them and failing on demand."""

    def __init__(self, app, fail: Callable[[httpx.Request], bool] | None = None):
        self.inner = httpx.ASGITransport(app=app)
        self.fail = fail or (lambda request: False)
        self.requests: list[tuple[str, str]] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if self.fail(request):
            return httpx.Response(500, json={"detail": "Internal Server Error"})
        return await self.inner.handle_async_request(request)

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.requests if m == method)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def app(db_session_factory):
    def override_session():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    application = create_app()
    application.dependency_overrides[get_session] = override_session
    return application


@pytest.fixture
def api(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def transport(app) -> RecordingTransport:
    return RecordingTransport(app)


@pytest.fixture
async def catalog(transport):
    client = CatalogClient(base_url=API_URL, transport=transport)
    yield CatalogSession(client)
    await client.aclose()


@pytest.fixture
def draft() -> dict:
    return {
        "name": "Organic Apples",
        "sku": "APL-ORG-001",
        "category": "Produce",
        "price": "3.99",
        "stock": "120",
        "image": "",
        "location": "Aisle 2",
        "directions": "Go straight, second shelf on the right",
        "description": "Crisp, fresh, organically grown apples.",
    }
