from dataclasses import replace
from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from orderdesk.errors import (
    CustomerNotFound,
    InvalidInput,
    InvalidStatusTransition,
    OrderItemNotFound,
    OrderNotFound,
    ProductNotFound,
)
from orderdesk.models.order import Order
from orderdesk.repositories.base import OrderFilters
from orderdesk.repositories.orders import OrderChanges, OrderItemChanges, OrderRepository
from orderdesk.schemas import OrderData, OrderItemData
from orderdesk.services.active_order import ActiveOrderGuard
from orderdesk.services.base import TransactionalService, order_data
from orderdesk.services.directories import CustomerDirectory, ProductCatalog
from orderdesk.services.pricing import calculate_total
from orderdesk.utils.enums import OrderStatus, can_transition, normalize_order_status
from orderdesk.utils.logging import get_logger

logger = get_logger(__name__)


class OrderLifecycleService(TransactionalService):
    """Order creation, line items and status changes.

    Any call that touches line items re-sums the order and writes the new
    ``total_price`` in the same transaction as the item change.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        orders: OrderRepository,
        guard: ActiveOrderGuard,
        products: ProductCatalog,
        customers: CustomerDirectory,
    ):
        super().__init__(session_factory)
        self._orders = orders
        self._guard = guard
        self._products = products
        self._customers = customers

    # ---------- orders ----------
    def create_order(self, customer_id: int, shop_id: int, notes: Optional[str] = None) -> OrderData:
        with self._transaction("create_order") as db:
            if not self._customers.customer_exists(customer_id, shop_id, db):
                raise CustomerNotFound()

            self._guard.ensure_no_active_order(customer_id, shop_id, db)
            order = self._orders.create_order(customer_id, shop_id, notes, db=db)

            logger.info("Order created", order_id=order.id, shop_id=shop_id, customer_id=customer_id)
            return order_data(order)

    def get_order(self, order_id: int, shop_id: Optional[int] = None) -> OrderData:
        with self._transaction("get_order") as db:
            order = self._load_order(db, order_id, shop_id)
            return order_data(order, self._orders.list_items(order.id, db=db))

    def list_orders(self, shop_id: int, filters: Optional[OrderFilters] = None) -> List[OrderData]:
        if filters is not None and filters.status:
            status = normalize_order_status(filters.status)
            if status is None:
                raise InvalidInput(f"unknown order status: {filters.status}")
            filters = replace(filters, status=status.value)

        with self._transaction("list_orders") as db:
            return [order_data(o) for o in self._orders.list_orders(shop_id, filters, db=db)]

    def update_order(
        self,
        order_id: int,
        status: Optional[str] = None,
        total_price: Optional[int] = None,
        notes: Optional[str] = None,
        shop_id: Optional[int] = None,
    ) -> OrderData:
        """Partial update; fields left as ``None`` are not touched.

        ``total_price`` is written as given. It exists for manual corrections
        and does not go through the calculator.
        """
        with self._transaction("update_order") as db:
            order = self._load_order(db, order_id, shop_id, for_update=True)

            new_status = None
            if status is not None:
                target = normalize_order_status(status)
                if target is None:
                    raise InvalidInput(f"unknown order status: {status}")

                current = normalize_order_status(order.status) or OrderStatus.CREATED
                if not can_transition(current, target):
                    raise InvalidStatusTransition(
                        f"cannot move order from {current.value} to {target.value}"
                    )
                new_status = target.value

            if total_price is not None and total_price < 0:
                raise InvalidInput("total_price must not be negative")

            changes = OrderChanges(status=new_status, total_price=total_price, notes=notes)
            updated = self._orders.update_order(order.id, changes, db=db)

            if new_status is not None:
                logger.info("Order status changed", order_id=order.id, status=new_status)
            return order_data(updated, self._orders.list_items(order.id, db=db))

    def delete_order(self, order_id: int, shop_id: Optional[int] = None) -> None:
        with self._transaction("delete_order") as db:
            order = self._load_order(db, order_id, shop_id)
            self._orders.delete_order(order.id, db=db)
            logger.info("Order deleted", order_id=order_id)

    # ---------- items ----------
    def add_item(
        self,
        order_id: int,
        product_id: int,
        qty: int,
        shop_id: Optional[int] = None,
    ) -> OrderItemData:
        if qty is None or qty <= 0:
            raise InvalidInput("qty must be greater than 0")

        with self._transaction("add_order_item") as db:
            order = self._load_order(db, order_id, shop_id, for_update=True)
            product = self._products.get_product(product_id, order.shop_id, db)
            if product is None:
                raise ProductNotFound()

            item = self._orders.add_item(
                order.id, product.id, qty, product.price, product.name, db=db
            )
            self._recalculate_total(db, order)
            return OrderItemData.model_validate(item)

    def update_item(
        self,
        order_id: int,
        item_id: int,
        product_id: Optional[int] = None,
        qty: Optional[int] = None,
        shop_id: Optional[int] = None,
    ) -> OrderItemData:
        if qty is not None and qty <= 0:
            raise InvalidInput("qty must be greater than 0")

        with self._transaction("update_order_item") as db:
            order = self._load_order(db, order_id, shop_id, for_update=True)
            item = self._orders.get_item(item_id, order.id, db=db)
            if item is None:
                raise OrderItemNotFound()

            changes = OrderItemChanges(qty=qty)
            if product_id is not None and product_id != item.product_id:
                # a different product is a new snapshot
                product = self._products.get_product(product_id, order.shop_id, db)
                if product is None:
                    raise ProductNotFound()
                changes.product_id = product.id
                changes.product_name = product.name
                changes.price = product.price

            item = self._orders.update_item(item.id, order.id, changes, db=db)
            self._recalculate_total(db, order)
            return OrderItemData.model_validate(item)

    def delete_item(self, order_id: int, item_id: int, shop_id: Optional[int] = None) -> None:
        with self._transaction("delete_order_item") as db:
            order = self._load_order(db, order_id, shop_id, for_update=True)
            if not self._orders.delete_item(item_id, order.id, db=db):
                raise OrderItemNotFound()
            self._recalculate_total(db, order)

    def get_item(self, order_id: int, item_id: int, shop_id: Optional[int] = None) -> OrderItemData:
        with self._transaction("get_order_item") as db:
            order = self._load_order(db, order_id, shop_id)
            item = self._orders.get_item(item_id, order.id, db=db)
            if item is None:
                raise OrderItemNotFound()
            return OrderItemData.model_validate(item)

    def list_items(self, order_id: int, shop_id: Optional[int] = None) -> List[OrderItemData]:
        with self._transaction("list_order_items") as db:
            order = self._load_order(db, order_id, shop_id)
            return [OrderItemData.model_validate(i) for i in self._orders.list_items(order.id, db=db)]

    # ---------- helpers ----------
    def _load_order(
        self,
        db: Session,
        order_id: int,
        shop_id: Optional[int],
        for_update: bool = False,
    ) -> Order:
        order = self._orders.get_order(order_id, shop_id, db=db, for_update=for_update)
        if order is None:
            raise OrderNotFound()
        return order

    def _recalculate_total(self, db: Session, order: Order) -> int:
        total = calculate_total(self._orders.list_items(order.id, db=db))
        self._orders.update_order(order.id, OrderChanges(total_price=total), db=db)
        return total
