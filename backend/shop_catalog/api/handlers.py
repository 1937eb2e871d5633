"""Translate catalog exceptions into JSON error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shop_catalog.core.exceptions import CatalogError


async def catalog_exception_handler(request: Request, exc: CatalogError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


def init_exception_handlers(app: FastAPI):
    app.add_exception_handler(CatalogError, catalog_exception_handler)
