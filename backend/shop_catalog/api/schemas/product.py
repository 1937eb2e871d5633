"""Pydantic models describing Product payloads on the wire."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shop_catalog.utils.timestamps import MAX_EPOCH_MS

CATEGORIES = [
    "Grocery",
    "Bakery",
    "Produce",
    "Dairy",
    "Electronics",
    "Home",
    "Health",
    "Beauty",
    "Other",
]
DEFAULT_CATEGORY = "Other"


def coerce_category(value: Any) -> str:
    """Map anything outside the fixed category set to the default category."""
    if isinstance(value, str) and value in CATEGORIES:
        return value
    return DEFAULT_CATEGORY


class ProductBase(BaseModel):
    name: str
    sku: str = Field(..., description="Stock keeping unit; not required to be unique")
    category: str = DEFAULT_CATEGORY
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0, le=MAX_EPOCH_MS)
    image: str | None = None
    location: str = ""
    directions: str = ""
    description: str = ""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> str:
        return coerce_category(v)

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v: Any) -> Any:
        return "" if v is None else v


class ProductCreate(ProductBase):
    """Body of POST /products. The server assigns identity and timestamps."""

    created_at: int | None = Field(
        None,
        ge=0,
        le=MAX_EPOCH_MS,
        validation_alias=AliasChoices("createdAt", "created_at"),
        description="Kept when re-importing a snapshot; defaults to now",
    )


class ProductUpdate(ProductBase):
    """Full replacement body of PUT /products/{id}. createdAt is immutable."""


class ProductRead(ProductBase):
    server_id: str = Field(
        ...,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )
    image: str
    created_at: int = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    updated_at: int = Field(
        ...,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class DeleteAck(BaseModel):
    success: bool = True
