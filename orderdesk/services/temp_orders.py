from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from sqlalchemy.orm import sessionmaker

from orderdesk.errors import (
    InvalidInput,
    ProductNotFound,
    ShopNotFound,
    TempOrderNotFound,
    TempOrderNotPending,
)
from orderdesk.repositories.base import OrderFilters
from orderdesk.repositories.temp_orders import TempOrderChanges, TempOrderRepository
from orderdesk.schemas import TempOrderData
from orderdesk.services.base import TransactionalService, temp_order_data
from orderdesk.services.directories import ProductCatalog, ShopDirectory
from orderdesk.services.pricing import calculate_total
from orderdesk.utils.enums import TempOrderStatus, normalize_temp_order_status
from orderdesk.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TempOrderItemInput:
    product_id: int
    qty: int


def validate_temp_order(customer_name: str, customer_phone: str, items: Sequence[TempOrderItemInput]) -> None:
    if not (customer_name or "").strip():
        raise InvalidInput("customer_name is required")
    if not (customer_phone or "").strip():
        raise InvalidInput("customer_phone is required")
    if not items:
        raise InvalidInput("order_items is required")
    for item in items:
        if item.product_id is None or item.product_id <= 0:
            raise InvalidInput("product_id is required")
        if item.qty is None or item.qty <= 0:
            raise InvalidInput("qty is required")


class TempOrderLifecycleService(TransactionalService):
    """Public intake of temp orders and their rejection by staff."""

    def __init__(
        self,
        session_factory: sessionmaker,
        temp_orders: TempOrderRepository,
        shops: ShopDirectory,
        products: ProductCatalog,
    ):
        super().__init__(session_factory)
        self._temp_orders = temp_orders
        self._shops = shops
        self._products = products

    def create_temp_order(
        self,
        share_token: str,
        customer_name: str,
        customer_phone: str,
        items: Sequence[TempOrderItemInput],
    ) -> TempOrderData:
        validate_temp_order(customer_name, customer_phone, items)

        with self._transaction("create_temp_order") as db:
            shop_id = self._shops.resolve_share_token(share_token, db)
            if shop_id is None:
                raise ShopNotFound()

            temp_order = self._temp_orders.create_temp_order(
                shop_id, customer_name.strip(), customer_phone.strip(), db=db
            )
            for line in items:
                product = self._products.get_product(line.product_id, shop_id, db)
                if product is None:
                    raise ProductNotFound(f"product {line.product_id} not found")
                self._temp_orders.add_item(
                    temp_order.id, product.id, line.qty, product.price, product.name, db=db
                )

            saved_items = self._temp_orders.list_items(temp_order.id, db=db)
            temp_order = self._temp_orders.update_temp_order(
                temp_order.id,
                TempOrderChanges(total_price=calculate_total(saved_items)),
                db=db,
                touch=False,  # still part of the insert
            )

            logger.info(
                "Temp order received",
                temp_order_id=temp_order.id,
                shop_id=shop_id,
                items=len(saved_items),
                total_price=temp_order.total_price,
            )
            return temp_order_data(temp_order, saved_items)

    def get_temp_order(self, temp_order_id: int, shop_id: Optional[int] = None) -> TempOrderData:
        with self._transaction("get_temp_order") as db:
            temp_order = self._temp_orders.get_temp_order(temp_order_id, shop_id, db=db)
            if temp_order is None:
                raise TempOrderNotFound()
            return temp_order_data(temp_order, self._temp_orders.list_items(temp_order.id, db=db))

    def list_temp_orders(self, shop_id: int, filters: Optional[OrderFilters] = None) -> List[TempOrderData]:
        if filters is not None and filters.status:
            status = normalize_temp_order_status(filters.status)
            if status is None:
                raise InvalidInput(f"unknown temp order status: {filters.status}")
            filters = replace(filters, status=status.value)

        with self._transaction("list_temp_orders") as db:
            return [temp_order_data(t) for t in self._temp_orders.list_temp_orders(shop_id, filters, db=db)]

    def reject_temp_order(self, temp_order_id: int, shop_id: Optional[int] = None) -> TempOrderData:
        """pending -> rejected.

        Rejecting an already rejected temp order changes nothing. An accepted
        one has been merged into a real order and cannot be rejected anymore.
        """
        with self._transaction("reject_temp_order") as db:
            temp_order = self._temp_orders.get_temp_order(temp_order_id, shop_id, db=db, for_update=True)
            if temp_order is None:
                raise TempOrderNotFound()

            if temp_order.status == TempOrderStatus.ACCEPTED.value:
                raise TempOrderNotPending("temp order was already accepted")

            if temp_order.status == TempOrderStatus.PENDING.value:
                temp_order = self._temp_orders.update_temp_order(
                    temp_order.id, TempOrderChanges(status=TempOrderStatus.REJECTED.value), db=db
                )
                logger.info("Temp order rejected", temp_order_id=temp_order.id)

            return temp_order_data(temp_order, self._temp_orders.list_items(temp_order.id, db=db))
