from fastapi import APIRouter, Depends

from orderdesk.deps import get_temp_order_service
from orderdesk.schemas import ERROR_RESPONSES, CreateTempOrderRequest, TempOrderData
from orderdesk.services.temp_orders import TempOrderItemInput, TempOrderLifecycleService

router = APIRouter(prefix="/public", tags=["public"], responses=ERROR_RESPONSES)


# Storefront checkout through a shop's share link. No auth: the token is the
# only thing tying the request to a shop.
@router.post("/shops/{share_token}/orders", response_model=TempOrderData)
def create_shop_temp_order(
    share_token: str,
    body: CreateTempOrderRequest,
    service: TempOrderLifecycleService = Depends(get_temp_order_service),
):
    items = [TempOrderItemInput(product_id=i.product_id, qty=i.qty) for i in body.order_items]
    return service.create_temp_order(share_token, body.customer_name, body.customer_phone, items)
