from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Catalog

class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Product id, assigned at seed time")
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    price: float = Field(..., ge=0, description="Unit price")
    image: str = Field("", description="Image URL")
    category: str = Field("", description="Category label")


# Orders

class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class OrderItem(BaseModel):
    # Numbers must arrive as JSON numbers; null leaves the zero value in place.
    product_id: int = Field(0, strict=True, description="Catalog product id, not checked against the catalog")
    quantity: int = Field(0, strict=True, description="Units ordered, any integer")

    @model_validator(mode="before")
    @classmethod
    def null_item_is_empty(cls, data):
        return {} if data is None else data

    @field_validator("product_id", "quantity", mode="before")
    @classmethod
    def null_is_zero(cls, v):
        return 0 if v is None else v


class OrderCreate(BaseModel):
    """Body of POST /api/orders. Only the items are read."""

    items: List[OrderItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def null_items_are_empty(cls, v):
        return [] if v is None else v


class Order(BaseModel):
    id: int
    items: List[OrderItem] = Field(default_factory=list)
    total: float
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime


# Payments

class PaymentRequest(BaseModel):
    order_id: int = Field(0, strict=True, description="Id of the order being paid")
    amount: float = Field(0.0, strict=True, description="Claimed amount, not checked against the order total")

    @field_validator("order_id", mode="before")
    @classmethod
    def null_order_id_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("amount", mode="before")
    @classmethod
    def widen_amount(cls, v):
        if v is None:
            return 0.0
        if isinstance(v, int) and not isinstance(v, bool):
            return float(v)
        return v


class PaymentResponse(BaseModel):
    success: bool
    message: str
    order_id: int
