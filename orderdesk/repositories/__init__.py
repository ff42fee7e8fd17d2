from .base import OrderFilters
from .orders import OrderChanges, OrderItemChanges, OrderRepository
from .temp_orders import TempOrderChanges, TempOrderRepository
