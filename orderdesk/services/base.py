from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from orderdesk.db import session_scope
from orderdesk.models.order import Order, OrderItem
from orderdesk.models.temp_order import TempOrder, TempOrderItem
from orderdesk.repositories.base import translate_errors
from orderdesk.schemas import OrderData, OrderItemData, TempOrderData, TempOrderItemData


class TransactionalService:
    """One public method call == one database transaction."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        # commit failures surface as RepositoryError like any other db error
        with translate_errors(operation):
            with session_scope(self._session_factory) as db:
                yield db


def order_data(order: Order, items: Optional[List[OrderItem]] = None) -> OrderData:
    return OrderData(
        id=order.id,
        shop_id=order.shop_id,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        total_price=order.total_price,
        status=order.status,
        notes=order.notes or "",
        items=[OrderItemData.model_validate(i) for i in (items or [])],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def temp_order_data(temp_order: TempOrder, items: Optional[List[TempOrderItem]] = None) -> TempOrderData:
    return TempOrderData(
        id=temp_order.id,
        shop_id=temp_order.shop_id,
        customer_name=temp_order.customer_name,
        customer_phone=temp_order.customer_phone,
        total_price=temp_order.total_price,
        status=temp_order.status,
        items=[TempOrderItemData.model_validate(i) for i in (items or [])],
        created_at=temp_order.created_at,
        updated_at=temp_order.updated_at,
    )
