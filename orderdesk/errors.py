"""Error types raised by the order core.

Domain errors are expected outcomes the HTTP layer turns into 4xx answers;
``RepositoryError`` wraps anything the database threw at us.
"""


class OrderDeskError(Exception):
    """Base class for every error raised by orderdesk."""


class DomainError(OrderDeskError):
    http_status = 400
    code = "domain_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])


# ---------- 404 ----------
class NotFoundError(DomainError):
    http_status = 404
    code = "not_found"


class OrderNotFound(NotFoundError):
    """order not found"""
    code = "order_not_found"


class OrderItemNotFound(NotFoundError):
    """order item not found"""
    code = "order_item_not_found"


class TempOrderNotFound(NotFoundError):
    """temp order not found"""
    code = "temp_order_not_found"


class ShopNotFound(NotFoundError):
    """shop not found"""
    code = "shop_not_found"


# ---------- 409 ----------
class ConflictError(DomainError):
    http_status = 409
    code = "conflict"


class ActiveOrderExists(ConflictError):
    """customer already has an active order in this shop"""
    code = "active_order_exists"


class InvalidStatusTransition(ConflictError):
    """status transition not allowed"""
    code = "invalid_status_transition"


class TempOrderNotPending(ConflictError):
    """temp order is no longer pending"""
    code = "temp_order_not_pending"


# ---------- 400 ----------
class InvalidInput(DomainError):
    """invalid input"""
    code = "validation"


class ProductNotFound(DomainError):
    """product not found"""
    code = "product_not_found"


class CustomerNotFound(DomainError):
    """customer not found"""
    code = "customer_not_found"


# ---------- infrastructure ----------
class RepositoryError(OrderDeskError):
    """A database call failed for a reason the domain does not model."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause
