"""Catalog error taxonomy shared by the API, the store and the client."""


class CatalogError(Exception):
    """Base class for catalog failures carrying an HTTP status and a message."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.detail)


class ValidationError(CatalogError):
    """A draft failed a pre-flight rule. Only the first failed rule is reported."""

    def __init__(self, detail: str, field: str | None = None):
        self.field = field
        super().__init__(status_code=400, detail=detail)


class NotFoundError(CatalogError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(status_code=404, detail=f"Product {product_id} not found")


class TransportError(CatalogError):
    """The catalog service could not be reached or answered with a server error."""

    def __init__(self, detail: str, status_code: int = 503):
        super().__init__(status_code=status_code, detail=detail)
