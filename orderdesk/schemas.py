"""Pydantic request/response schemas.

Services return the ``*Data`` models, built while their transaction is still
open; routers only serialise them.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Response payloads
# ---------------------------------------------------------------------------
class OrderItemData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    product_id: int
    product_name: str
    price: int
    qty: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderData(BaseModel):
    id: int
    shop_id: int
    customer_id: int
    customer_name: str
    total_price: int
    status: str
    notes: str = ""
    items: List[OrderItemData] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class TempOrderItemData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    temp_order_id: int
    product_id: int
    product_name: str
    price: int
    qty: int
    created_at: datetime


class TempOrderData(BaseModel):
    id: int
    shop_id: int
    customer_name: str
    customer_phone: str
    total_price: int
    status: str
    items: List[TempOrderItemData] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    code: str
    message: str


# Error envelope produced by the app-level handlers, for the OpenAPI docs
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_id: int = Field(gt=0)
    notes: Optional[str] = None


class UpdateOrderRequest(BaseModel):
    status: Optional[str] = None
    total_price: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class CreateOrderItemRequest(BaseModel):
    product_id: int = Field(gt=0)
    qty: int = Field(gt=0)


class UpdateOrderItemRequest(BaseModel):
    product_id: Optional[int] = Field(default=None, gt=0)
    qty: Optional[int] = Field(default=None, gt=0)


class TempOrderItemRequest(BaseModel):
    product_id: int
    qty: int


class CreateTempOrderRequest(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    order_items: List[TempOrderItemRequest] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Jane",
                    "customer_phone": "+6281234567",
                    "order_items": [{"product_id": 10, "qty": 2}],
                }
            ]
        }
    }


class MergeTempOrderRequest(BaseModel):
    temp_order_id: int = Field(gt=0)
    customer_id: int = Field(gt=0)
    order_id: Optional[int] = Field(default=None, gt=0)
