from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from orderdesk.errors import (
    CustomerNotFound,
    InvalidStatusTransition,
    OrderNotFound,
    TempOrderNotFound,
    TempOrderNotPending,
)
from orderdesk.models.order import Order
from orderdesk.repositories.orders import OrderChanges, OrderRepository
from orderdesk.repositories.temp_orders import TempOrderChanges, TempOrderRepository
from orderdesk.schemas import OrderData
from orderdesk.services.active_order import ActiveOrderGuard
from orderdesk.services.base import TransactionalService, order_data
from orderdesk.services.directories import CustomerDirectory
from orderdesk.services.pricing import calculate_total
from orderdesk.utils.enums import ACTIVE_ORDER_STATUSES, TempOrderStatus, normalize_order_status
from orderdesk.utils.logging import get_logger

logger = get_logger(__name__)


class MergeCoordinator(TransactionalService):
    """Turns a pending temp order into lines of a real order.

    Everything happens in one transaction: the target order (new or
    existing) receives a copy of every temp line, its total is re-summed, and
    the temp order is marked accepted. If any step fails nothing is kept and
    the temp order stays pending.

    Temp lines are always appended as new order lines, even when the order
    already has a line for the same product. An existing target must still be
    open: completed and cancelled orders do not take new lines.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        orders: OrderRepository,
        temp_orders: TempOrderRepository,
        guard: ActiveOrderGuard,
        customers: CustomerDirectory,
    ):
        super().__init__(session_factory)
        self._orders = orders
        self._temp_orders = temp_orders
        self._guard = guard
        self._customers = customers

    def merge_temp_order(
        self,
        temp_order_id: int,
        customer_id: int,
        shop_id: int,
        target_order_id: Optional[int] = None,
    ) -> OrderData:
        with self._transaction("merge_temp_order") as db:
            # row lock: a second merge of the same temp order waits here and
            # then finds it accepted
            temp_order = self._temp_orders.get_temp_order(
                temp_order_id, shop_id, db=db, for_update=True
            )
            if temp_order is None:
                raise TempOrderNotFound()
            if temp_order.status != TempOrderStatus.PENDING.value:
                raise TempOrderNotPending(f"temp order is {temp_order.status}")

            order = self._resolve_target(db, customer_id, shop_id, target_order_id)

            for line in self._temp_orders.list_items(temp_order.id, db=db):
                self._orders.add_item(
                    order.id, line.product_id, line.qty, line.price, line.product_name, db=db
                )

            items = self._orders.list_items(order.id, db=db)
            order = self._orders.update_order(
                order.id, OrderChanges(total_price=calculate_total(items)), db=db
            )

            self._temp_orders.update_temp_order(
                temp_order.id, TempOrderChanges(status=TempOrderStatus.ACCEPTED.value), db=db
            )

            logger.info(
                "Temp order merged",
                temp_order_id=temp_order.id,
                order_id=order.id,
                shop_id=shop_id,
                new_order=target_order_id is None,
                total_price=order.total_price,
            )
            return order_data(order, items)

    def _resolve_target(
        self,
        db: Session,
        customer_id: int,
        shop_id: int,
        target_order_id: Optional[int],
    ) -> Order:
        if target_order_id is not None:
            order = self._orders.get_order(target_order_id, shop_id, db=db, for_update=True)
            if order is None:
                raise OrderNotFound()
            # the target keeps its owner; customer_id only matters for a new order
            status = normalize_order_status(order.status)
            if status is None or status.value not in ACTIVE_ORDER_STATUSES:
                raise InvalidStatusTransition(f"cannot merge into a {order.status} order")
            return order

        if not self._customers.customer_exists(customer_id, shop_id, db):
            raise CustomerNotFound()
        self._guard.ensure_no_active_order(customer_id, shop_id, db)
        return self._orders.create_order(customer_id, shop_id, db=db)
