from typing import List

from fastapi import APIRouter, Depends

from orderdesk.deps import get_order_service, get_shop_id
from orderdesk.repositories.base import OrderFilters
from orderdesk.routers.filters import order_filters
from orderdesk.schemas import (
    CreateOrderItemRequest,
    CreateOrderRequest,
    ERROR_RESPONSES,
    OrderData,
    OrderItemData,
    StatusResponse,
    UpdateOrderItemRequest,
    UpdateOrderRequest,
)
from orderdesk.services.orders import OrderLifecycleService

router = APIRouter(prefix="/orders", tags=["orders"], responses=ERROR_RESPONSES)


# ---------- ORDERS ----------
@router.post("", response_model=OrderData)
def create_order(
    body: CreateOrderRequest,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.create_order(body.customer_id, shop_id, body.notes)


@router.get("", response_model=List[OrderData])
def list_orders(
    filters: OrderFilters = Depends(order_filters),
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.list_orders(shop_id, filters)


@router.get("/{order_id}", response_model=OrderData)
def get_order(
    order_id: int,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.get_order(order_id, shop_id)


@router.patch("/{order_id}", response_model=OrderData)
def update_order(
    order_id: int,
    body: UpdateOrderRequest,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.update_order(
        order_id,
        status=body.status,
        total_price=body.total_price,
        notes=body.notes,
        shop_id=shop_id,
    )


@router.delete("/{order_id}", response_model=StatusResponse)
def delete_order(
    order_id: int,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    service.delete_order(order_id, shop_id)
    return StatusResponse()


# ---------- ITEMS ----------
@router.post("/{order_id}/items", response_model=OrderItemData)
def add_order_item(
    order_id: int,
    body: CreateOrderItemRequest,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.add_item(order_id, body.product_id, body.qty, shop_id=shop_id)


@router.get("/{order_id}/items", response_model=List[OrderItemData])
def list_order_items(
    order_id: int,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.list_items(order_id, shop_id)


@router.get("/{order_id}/items/{item_id}", response_model=OrderItemData)
def get_order_item(
    order_id: int,
    item_id: int,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.get_item(order_id, item_id, shop_id)


@router.patch("/{order_id}/items/{item_id}", response_model=OrderItemData)
def update_order_item(
    order_id: int,
    item_id: int,
    body: UpdateOrderItemRequest,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    return service.update_item(
        order_id, item_id, product_id=body.product_id, qty=body.qty, shop_id=shop_id
    )


@router.delete("/{order_id}/items/{item_id}", response_model=StatusResponse)
def delete_order_item(
    order_id: int,
    item_id: int,
    shop_id: int = Depends(get_shop_id),
    service: OrderLifecycleService = Depends(get_order_service),
):
    service.delete_item(order_id, item_id, shop_id)
    return StatusResponse()
