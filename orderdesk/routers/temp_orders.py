from typing import List

from fastapi import APIRouter, Depends

from orderdesk.deps import get_merge_coordinator, get_shop_id, get_temp_order_service
from orderdesk.repositories.base import OrderFilters
from orderdesk.routers.filters import order_filters
from orderdesk.schemas import ERROR_RESPONSES, MergeTempOrderRequest, OrderData, TempOrderData
from orderdesk.services.merge import MergeCoordinator
from orderdesk.services.temp_orders import TempOrderLifecycleService

router = APIRouter(prefix="/temp_orders", tags=["temp-orders"], responses=ERROR_RESPONSES)


@router.get("", response_model=List[TempOrderData])
def list_temp_orders(
    filters: OrderFilters = Depends(order_filters),
    shop_id: int = Depends(get_shop_id),
    service: TempOrderLifecycleService = Depends(get_temp_order_service),
):
    return service.list_temp_orders(shop_id, filters)


# registered before /{temp_order_id} so "merge" is not read as an id
@router.post("/merge", response_model=OrderData)
def merge_temp_order(
    body: MergeTempOrderRequest,
    shop_id: int = Depends(get_shop_id),
    coordinator: MergeCoordinator = Depends(get_merge_coordinator),
):
    return coordinator.merge_temp_order(
        body.temp_order_id, body.customer_id, shop_id, target_order_id=body.order_id
    )


@router.get("/{temp_order_id}", response_model=TempOrderData)
def get_temp_order(
    temp_order_id: int,
    shop_id: int = Depends(get_shop_id),
    service: TempOrderLifecycleService = Depends(get_temp_order_service),
):
    return service.get_temp_order(temp_order_id, shop_id)


@router.patch("/{temp_order_id}/reject", response_model=TempOrderData)
def reject_temp_order(
    temp_order_id: int,
    shop_id: int = Depends(get_shop_id),
    service: TempOrderLifecycleService = Depends(get_temp_order_service),
):
    return service.reject_temp_order(temp_order_id, shop_id)
