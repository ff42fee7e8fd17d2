from typing import List, Optional
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderdesk.db import Base
from orderdesk.utils.enums import TempOrderStatus

__all__ = ["TempOrder", "TempOrderItem"]


class TempOrder(Base):
    """Draft order sent through a shop's public link, waiting for staff review."""

    __tablename__ = "temp_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    shop_id: Mapped[int] = mapped_column(ForeignKey("shops.id"), index=True)

    # no customer_id: the customer is picked by staff when merging
    customer_name: Mapped[str] = mapped_column(String(120))
    customer_phone: Mapped[str] = mapped_column(String(64))

    total_price: Mapped[int] = mapped_column(Integer, default=0)
    # pending | accepted | rejected
    status: Mapped[str] = mapped_column(String(24), default=TempOrderStatus.PENDING.value, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    items: Mapped[List["TempOrderItem"]] = relationship(
        "TempOrderItem",
        back_populates="temp_order",
        cascade="all, delete-orphan",
        order_by="TempOrderItem.id",
    )


class TempOrderItem(Base):
    __tablename__ = "temp_order_items"
    __table_args__ = (CheckConstraint("qty > 0", name="ck_temp_order_items_qty_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    temp_order_id: Mapped[int] = mapped_column(ForeignKey("temp_orders.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))

    product_name: Mapped[str] = mapped_column(String(255))
    price: Mapped[int] = mapped_column(Integer)
    qty: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    temp_order: Mapped["TempOrder"] = relationship("TempOrder", back_populates="items")
