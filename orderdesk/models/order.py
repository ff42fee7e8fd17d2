# orderdesk/models/order.py
from typing import List, Optional
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderdesk.db import Base
from orderdesk.utils.enums import OrderStatus

__all__ = ["Order", "OrderItem", "ACTIVE_ORDER_INDEX"]

ACTIVE_ORDER_INDEX = "uq_orders_one_active"
_ACTIVE_PREDICATE = text("status IN ('created', 'in_progress')")


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    shop_id: Mapped[int] = mapped_column(ForeignKey("shops.id"), index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), index=True)

    # sum of price * qty over the items, kept in sync on every item change
    total_price: Mapped[int] = mapped_column(Integer, default=0)

    # created | in_progress | completed | cancelled
    status: Mapped[str] = mapped_column(String(24), default=OrderStatus.CREATED.value, index=True)
    notes: Mapped[str] = mapped_column(String(1000), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    customer = relationship("Customer")
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def customer_name(self) -> str:
        return self.customer.name if self.customer else ""


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("qty > 0", name="ck_order_items_qty_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))

    # snapshot taken when the line is written, never re-read from products
    product_name: Mapped[str] = mapped_column(String(255))
    price: Mapped[int] = mapped_column(Integer)

    qty: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    order: Mapped["Order"] = relationship("Order", back_populates="items")


# At most one open order per customer per shop. Two concurrent creates that
# both pass the application check collide here instead of both committing.
Index(
    ACTIVE_ORDER_INDEX,
    Order.shop_id,
    Order.customer_id,
    unique=True,
    postgresql_where=_ACTIVE_PREDICATE,
    sqlite_where=_ACTIVE_PREDICATE,
)
