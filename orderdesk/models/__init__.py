# orderdesk/models/__init__.py
from .catalog import *      # Shop, Customer, Product
from .order import *        # Order, OrderItem
from .temp_order import *   # TempOrder, TempOrderItem
