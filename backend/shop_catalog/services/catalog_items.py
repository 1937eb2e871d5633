"""Client-side catalog items and their dual identity.

The working set keys list operations (selection, checkboxes, deletes) on a
local integer key. A server key exists only once the store has persisted the
product, so identity is either a draft or a persisted pair.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from shop_catalog.api.schemas.product import DEFAULT_CATEGORY, ProductRead


class DraftIdentity(BaseModel):
    kind: Literal["draft"] = "draft"
    local_key: int

    model_config = ConfigDict(frozen=True)


class PersistedIdentity(BaseModel):
    kind: Literal["persisted"] = "persisted"
    server_key: str
    local_key: int

    model_config = ConfigDict(frozen=True)


Identity = Union[DraftIdentity, PersistedIdentity]


class CatalogItem(BaseModel):
    identity: Identity = Field(..., discriminator="kind")
    name: str
    sku: str
    category: str = DEFAULT_CATEGORY
    price: float
    stock: int
    image: str
    location: str = ""
    directions: str = ""
    description: str = ""
    created_at: int
    updated_at: int

    @property
    def local_key(self) -> int:
        return self.identity.local_key

    @property
    def server_key(self) -> str | None:
        if isinstance(self.identity, PersistedIdentity):
            return self.identity.server_key
        return None

    @property
    def is_persisted(self) -> bool:
        return self.server_key is not None

    @classmethod
    def from_document(cls, doc: ProductRead, local_key: int) -> "CatalogItem":
        return cls(
            identity=PersistedIdentity(server_key=doc.server_id, local_key=local_key),
            **doc.model_dump(exclude={"server_id"}),
        )

    def to_body(self) -> dict[str, Any]:
        """Fields sent to the API. Never includes either identity."""
        return {
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "price": self.price,
            "stock": self.stock,
            "image": self.image,
            "location": self.location,
            "directions": self.directions,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_export(self) -> dict[str, Any]:
        """Snapshot row: the wire shape plus the local key and server key if any."""
        row: dict[str, Any] = {"id": self.local_key}
        if self.server_key is not None:
            row["_id"] = self.server_key
        row.update(self.to_body())
        return row
