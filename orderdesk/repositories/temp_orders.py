from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, or_, update
from sqlalchemy.orm import Session

from orderdesk.models.temp_order import TempOrder, TempOrderItem
from orderdesk.repositories.base import Changes, OrderFilters, Repository
from orderdesk.utils.enums import TempOrderStatus


@dataclass
class TempOrderChanges(Changes):
    status: Optional[str] = None
    total_price: Optional[int] = None


class TempOrderRepository(Repository):
    """Persistence for ``temp_orders`` and ``temp_order_items``."""

    def create_temp_order(
        self,
        shop_id: int,
        customer_name: str,
        customer_phone: str,
        db: Optional[Session] = None,
    ) -> TempOrder:
        with self._session(db, "create_temp_order") as s:
            temp_order = TempOrder(
                shop_id=shop_id,
                customer_name=customer_name,
                customer_phone=customer_phone,
                status=TempOrderStatus.PENDING.value,
                total_price=0,
            )
            s.add(temp_order)
            s.flush()
            return temp_order

    def get_temp_order(
        self,
        temp_order_id: int,
        shop_id: Optional[int] = None,
        db: Optional[Session] = None,
        for_update: bool = False,
    ) -> Optional[TempOrder]:
        with self._session(db, "get_temp_order") as s:
            q = s.query(TempOrder).filter(TempOrder.id == temp_order_id)
            if shop_id is not None:
                q = q.filter(TempOrder.shop_id == shop_id)
            if for_update:
                q = q.with_for_update()
            return q.first()

    def list_temp_orders(
        self,
        shop_id: int,
        filters: Optional[OrderFilters] = None,
        db: Optional[Session] = None,
    ) -> List[TempOrder]:
        filters = filters or OrderFilters()
        with self._session(db, "list_temp_orders") as s:
            q = s.query(TempOrder).filter(TempOrder.shop_id == shop_id)
            search = (filters.search or "").strip()
            if search:
                pattern = f"%{search}%"
                q = q.filter(
                    or_(
                        TempOrder.customer_name.ilike(pattern),
                        TempOrder.customer_phone.ilike(pattern),
                    )
                )
            if filters.date_from is not None:
                q = q.filter(TempOrder.created_at >= filters.date_from)
            if filters.date_to is not None:
                q = q.filter(TempOrder.created_at < filters.date_to)
            if filters.status:
                q = q.filter(TempOrder.status == filters.status)
            return q.order_by(TempOrder.created_at.desc(), TempOrder.id.desc()).all()

    def update_temp_order(
        self,
        temp_order_id: int,
        changes: TempOrderChanges,
        db: Optional[Session] = None,
        touch: bool = True,
    ) -> Optional[TempOrder]:
        values = changes.as_values()
        if touch:
            values["updated_at"] = datetime.utcnow()

        with self._session(db, "update_temp_order") as s:
            result = s.execute(
                update(TempOrder).where(TempOrder.id == temp_order_id).values(**values)
            )
            if result.rowcount == 0:
                return None
            return s.get(TempOrder, temp_order_id)

    def delete_temp_order(self, temp_order_id: int, db: Optional[Session] = None) -> bool:
        with self._session(db, "delete_temp_order") as s:
            s.execute(delete(TempOrderItem).where(TempOrderItem.temp_order_id == temp_order_id))
            result = s.execute(delete(TempOrder).where(TempOrder.id == temp_order_id))
            return result.rowcount > 0

    # ---------- items ----------
    def add_item(
        self,
        temp_order_id: int,
        product_id: int,
        qty: int,
        price: int,
        product_name: str,
        db: Optional[Session] = None,
    ) -> TempOrderItem:
        with self._session(db, "add_temp_order_item") as s:
            item = TempOrderItem(
                temp_order_id=temp_order_id,
                product_id=product_id,
                qty=qty,
                price=price,
                product_name=product_name,
            )
            s.add(item)
            s.flush()
            return item

    def list_items(self, temp_order_id: int, db: Optional[Session] = None) -> List[TempOrderItem]:
        with self._session(db, "list_temp_order_items") as s:
            return (
                s.query(TempOrderItem)
                .filter(TempOrderItem.temp_order_id == temp_order_id)
                .order_by(TempOrderItem.id)
                .all()
            )
