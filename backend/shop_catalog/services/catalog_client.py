"""HTTP client for the catalog access API.

Wraps httpx and turns every way a request can go wrong into one of the catalog
exceptions, so callers only deal with TransportError, NotFoundError and
ValidationError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError as SchemaError

from shop_catalog.api.schemas.product import ProductRead
from shop_catalog.core.config import get_settings
from shop_catalog.core.exceptions import NotFoundError, TransportError, ValidationError

logger = logging.getLogger(__name__)

_product_list = TypeAdapter(list[ProductRead])


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if detail is None:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    return detail if isinstance(detail, str) else str(detail)


class CatalogClient:
    """Request/response access to ``/products``. No retries, one timeout."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.catalog_api_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout_seconds
        self._http = httpx.AsyncClient(
            timeout=self.timeout,
            transport=transport,
            headers={"User-Agent": "Storefront-Catalog-Client/1.0"},
        )

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out: {e}")
            raise TransportError(
                f"Request timeout after {self.timeout}s", status_code=504
            ) from e
        except httpx.RequestError as e:
            logger.error(f"{method} {url} request error: {e}")
            raise TransportError(f"Request failed: {str(e)}") from e

        if response.is_success:
            return response
        if response.status_code in (400, 422):
            raise ValidationError(_error_detail(response))
        if response.status_code == 404:
            # Only updates can 404; the path ends with the server key
            raise NotFoundError(url.rsplit("/", 1)[-1])
        logger.error(f"{method} {url} failed with HTTP {response.status_code}")
        raise TransportError(_error_detail(response), status_code=502)

    @staticmethod
    def _parse(response: httpx.Response, adapter: Any) -> Any:
        try:
            return adapter(response.json())
        except (ValueError, SchemaError) as e:
            raise TransportError(
                f"Malformed response from catalog service: {e}", status_code=502
            ) from e

    async def list_products(self) -> list[ProductRead]:
        response = await self._request("GET", self.base_url)
        return self._parse(response, _product_list.validate_python)

    async def create_product(self, body: dict[str, Any]) -> ProductRead:
        response = await self._request("POST", self.base_url, json=body)
        return self._parse(response, ProductRead.model_validate)

    async def update_product(self, server_key: str, body: dict[str, Any]) -> ProductRead:
        response = await self._request("PUT", f"{self.base_url}/{server_key}", json=body)
        return self._parse(response, ProductRead.model_validate)

    async def delete_product(self, server_key: str) -> None:
        await self._request("DELETE", f"{self.base_url}/{server_key}")
