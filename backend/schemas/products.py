from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InventoryRecord(BaseModel):
    location_id: int
    location_name: str
    available: Optional[int] = None


class ProductImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    src: str
    alt: Optional[str] = None


class ProductOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    name: str
    values: List[str] = []


class Variant(BaseModel):
    # Every native Shopify variant field is passed through
    model_config = ConfigDict(extra="allow")

    id: int
    title: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[str] = None
    image_id: Optional[int] = None
    inventory_item_id: Optional[int] = None
    inventory_by_location: List[InventoryRecord] = []


class Product(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    title: str
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: Optional[str] = None
    image: Optional[ProductImage] = None
    images: List[ProductImage] = []
    options: List[ProductOption] = []
    variants: List[Variant] = []


class StockUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quantity: int
    location_id: Optional[int] = Field(default=None, alias="locationId")

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_integer(cls, v):
        if isinstance(v, bool) or v is None:
            raise ValueError("quantity must be an integer")
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("quantity must be an integer")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class StockUpdateResponse(BaseModel):
    message: str
    updatedVariantId: str
    newQuantity: int
    updatedLocationId: Optional[int] = None
    updatedAt: datetime


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    timestamp: Optional[datetime] = None
