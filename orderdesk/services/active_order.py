from sqlalchemy.orm import Session

from orderdesk.errors import ActiveOrderExists
from orderdesk.repositories.orders import OrderRepository
from orderdesk.utils.logging import get_logger

logger = get_logger(__name__)


class ActiveOrderGuard:
    """Keeps a customer at one open (created / in_progress) order per shop.

    The lookup here gives callers a clean error in the common case. It is a
    check-then-act step, so two requests can both pass it; the partial unique
    index ``uq_orders_one_active`` rejects the second insert and the
    repository reports that as ``ActiveOrderExists`` too.
    """

    def __init__(self, orders: OrderRepository):
        self._orders = orders

    def ensure_no_active_order(self, customer_id: int, shop_id: int, db: Session) -> None:
        active = self._orders.get_active_order(customer_id, shop_id, db=db)
        if active is not None:
            logger.info(
                "Active order already open",
                customer_id=customer_id,
                shop_id=shop_id,
                order_id=active.id,
                status=active.status,
            )
            raise ActiveOrderExists()
