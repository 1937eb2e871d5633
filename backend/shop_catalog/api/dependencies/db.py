"""Request-scoped database session for the catalog routes."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from shop_catalog.db.session import get_db


def get_session() -> Generator[Session, None, None]:
    """Yield a managed session; tests swap this out via ``dependency_overrides``."""
    yield from get_db()
