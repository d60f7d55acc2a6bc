# app/core.py
# Pydantic request/response schemas.
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import OrderStatus
from .pagination import MAX_STORE_INT


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------
# Categories
# ---------------------------
class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1)


class CategoryOut(_ORMModel):
    id: int
    name: str
    slug: str = ""

    @field_validator("slug", mode="before")
    @classmethod
    def _null_slug(cls, v):
        return v or ""


# ---------------------------
# Reviews
# ---------------------------
class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    text: str = ""


class ReviewOut(_ORMModel):
    id: int
    rating: int
    text: str
    user_id: int
    product_id: int
    created_at: datetime


class AverageRating(BaseModel):
    rating: Optional[float] = None


# ---------------------------
# Products
# ---------------------------
class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: int = Field(..., ge=0, le=MAX_STORE_INT)
    images: List[str] = Field(default_factory=list)
    category_id: int = Field(..., alias="categoryId")

    model_config = ConfigDict(populate_by_name=True)


class ProductOut(_ORMModel):
    id: int
    name: str
    slug: str = ""
    description: str
    price: int
    images: List[str] = Field(default_factory=list)
    created_at: datetime
    category: Optional[CategoryOut] = None
    reviews: List[ReviewOut] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _null_slug(cls, v):
        return v or ""

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, v):
        return v or []


class ProductPage(BaseModel):
    products: List[ProductOut]
    count: int


class DraftCreated(BaseModel):
    id: int


# ---------------------------
# Orders
# ---------------------------
class OrderItemIn(BaseModel):
    product_id: int = Field(..., alias="productId", ge=1, le=MAX_STORE_INT)
    quantity: int = Field(..., ge=1, le=MAX_STORE_INT)
    price: int = Field(..., ge=0, le=MAX_STORE_INT)

    model_config = ConfigDict(populate_by_name=True)


class OrderIn(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)


class OrderItemOut(_ORMModel):
    id: int
    product_id: int
    quantity: int
    price: int


class OrderOut(_ORMModel):
    id: int
    user_id: int
    status: OrderStatus
    total: int
    created_at: datetime
    items: List[OrderItemOut]


class PaymentRequest(BaseModel):
    """What a payment gateway receives so its callbacks can name the order."""
    description: str
    metadata: Dict[str, str]


class PlacedOrder(BaseModel):
    order: OrderOut
    payment: PaymentRequest


class PaymentObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PaymentEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str
    object: PaymentObject = Field(default_factory=PaymentObject)


class PaymentEventResult(BaseModel):
    event: str
    changed: bool = False
    order_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    message: str = "Success"


# ---------------------------
# Statistics
# ---------------------------
class StatisticItem(BaseModel):
    name: str
    value: Any
