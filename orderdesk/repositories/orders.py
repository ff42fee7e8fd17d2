from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orderdesk.errors import ActiveOrderExists
from orderdesk.models.catalog import Customer
from orderdesk.models.order import Order, OrderItem
from orderdesk.repositories.base import (
    Changes,
    OrderFilters,
    Repository,
    is_active_order_violation,
)
from orderdesk.utils.enums import (
    ACTIVE_ORDER_STATUSES,
    OrderStatus,
    normalize_order_status,
    order_status_spellings,
)


@dataclass
class OrderChanges(Changes):
    status: Optional[str] = None
    total_price: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class OrderItemChanges(Changes):
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    price: Optional[int] = None
    qty: Optional[int] = None


class OrderRepository(Repository):
    """Persistence for ``orders`` and ``order_items``.

    Reads that find nothing return ``None``; callers decide whether that is a
    404. Every write flushes, so later reads in the same transaction see it.
    """

    # ---------- orders ----------
    def create_order(
        self,
        customer_id: int,
        shop_id: int,
        notes: Optional[str] = None,
        db: Optional[Session] = None,
    ) -> Order:
        with self._session(db, "create_order") as s:
            order = Order(
                customer_id=customer_id,
                shop_id=shop_id,
                notes=notes or "",
                status=OrderStatus.CREATED.value,
                total_price=0,  # filled in once items arrive
            )
            s.add(order)
            try:
                s.flush()
            except IntegrityError as exc:
                if is_active_order_violation(exc):
                    raise ActiveOrderExists() from exc
                raise
            return order

    def get_order(
        self,
        order_id: int,
        shop_id: Optional[int] = None,
        db: Optional[Session] = None,
        for_update: bool = False,
    ) -> Optional[Order]:
        with self._session(db, "get_order") as s:
            q = s.query(Order).filter(Order.id == order_id)
            if shop_id is not None:
                q = q.filter(Order.shop_id == shop_id)
            if for_update:
                q = q.with_for_update()
            return q.first()

    def list_orders(
        self,
        shop_id: int,
        filters: Optional[OrderFilters] = None,
        db: Optional[Session] = None,
    ) -> List[Order]:
        filters = filters or OrderFilters()
        with self._session(db, "list_orders") as s:
            q = (
                s.query(Order)
                .join(Customer, Order.customer_id == Customer.id)
                .filter(Order.shop_id == shop_id)
            )
            search = (filters.search or "").strip()
            if search:
                pattern = f"%{search}%"
                q = q.filter(or_(Customer.name.ilike(pattern), Customer.phone.ilike(pattern)))
            if filters.date_from is not None:
                q = q.filter(Order.created_at >= filters.date_from)
            if filters.date_to is not None:
                q = q.filter(Order.created_at < filters.date_to)
            if filters.status:
                status = normalize_order_status(filters.status)
                if status is None:
                    q = q.filter(Order.status == filters.status)
                else:
                    # rows written before the rename still carry the old spelling
                    q = q.filter(Order.status.in_(order_status_spellings(status)))
            return q.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def get_active_order(
        self,
        customer_id: int,
        shop_id: int,
        db: Optional[Session] = None,
    ) -> Optional[Order]:
        with self._session(db, "get_active_order") as s:
            return (
                s.query(Order)
                .filter(
                    Order.customer_id == customer_id,
                    Order.shop_id == shop_id,
                    Order.status.in_(sorted(ACTIVE_ORDER_STATUSES)),
                )
                .order_by(Order.created_at.desc(), Order.id.desc())
                .first()
            )

    def update_order(
        self,
        order_id: int,
        changes: OrderChanges,
        db: Optional[Session] = None,
    ) -> Optional[Order]:
        values = changes.as_values()
        values["updated_at"] = datetime.utcnow()

        with self._session(db, "update_order") as s:
            stmt = update(Order).where(Order.id == order_id).values(**values)
            try:
                result = s.execute(stmt)
            except IntegrityError as exc:
                # reopening an order while another one is active
                if is_active_order_violation(exc):
                    raise ActiveOrderExists() from exc
                raise
            if result.rowcount == 0:
                return None
            return s.get(Order, order_id)

    def delete_order(self, order_id: int, db: Optional[Session] = None) -> bool:
        with self._session(db, "delete_order") as s:
            s.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
            result = s.execute(delete(Order).where(Order.id == order_id))
            return result.rowcount > 0

    # ---------- items ----------
    def add_item(
        self,
        order_id: int,
        product_id: int,
        qty: int,
        price: int,
        product_name: str,
        db: Optional[Session] = None,
    ) -> OrderItem:
        with self._session(db, "add_order_item") as s:
            item = OrderItem(
                order_id=order_id,
                product_id=product_id,
                qty=qty,
                price=price,
                product_name=product_name,
            )
            s.add(item)
            s.flush()
            return item

    def get_item(
        self,
        item_id: int,
        order_id: int,
        db: Optional[Session] = None,
    ) -> Optional[OrderItem]:
        with self._session(db, "get_order_item") as s:
            return (
                s.query(OrderItem)
                .filter(OrderItem.id == item_id, OrderItem.order_id == order_id)
                .first()
            )

    def list_items(self, order_id: int, db: Optional[Session] = None) -> List[OrderItem]:
        with self._session(db, "list_order_items") as s:
            return (
                s.query(OrderItem)
                .filter(OrderItem.order_id == order_id)
                .order_by(OrderItem.id)
                .all()
            )

    def update_item(
        self,
        item_id: int,
        order_id: int,
        changes: OrderItemChanges,
        db: Optional[Session] = None,
    ) -> Optional[OrderItem]:
        values = changes.as_values()
        values["updated_at"] = datetime.utcnow()

        with self._session(db, "update_order_item") as s:
            result = s.execute(
                update(OrderItem)
                .where(OrderItem.id == item_id, OrderItem.order_id == order_id)
                .values(**values)
            )
            if result.rowcount == 0:
                return None
            return s.get(OrderItem, item_id)

    def delete_item(self, item_id: int, order_id: int, db: Optional[Session] = None) -> bool:
        with self._session(db, "delete_order_item") as s:
            result = s.execute(
                delete(OrderItem).where(OrderItem.id == item_id, OrderItem.order_id == order_id)
            )
            return result.rowcount > 0
