from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class OrderStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TempOrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Statuses that count towards "one open order per customer per shop"
ACTIVE_ORDER_STATUSES: FrozenSet[str] = frozenset(
    {OrderStatus.CREATED.value, OrderStatus.IN_PROGRESS.value}
)

# Values written by earlier versions of the system
LEGACY_ORDER_STATUSES: Dict[str, OrderStatus] = {
    "pending": OrderStatus.CREATED,
    "in_delivery": OrderStatus.IN_PROGRESS,
    "done": OrderStatus.COMPLETED,
    "canceled": OrderStatus.CANCELLED,
}

# Allowed explicit transitions; re-setting the current status is always fine
ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def normalize_order_status(value: str) -> Optional[OrderStatus]:
    """Map a raw status string (current or legacy spelling) to ``OrderStatus``."""
    raw = (value or "").strip().lower()
    try:
        return OrderStatus(raw)
    except ValueError:
        return LEGACY_ORDER_STATUSES.get(raw)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return current == target or target in ORDER_TRANSITIONS.get(current, frozenset())


def order_status_spellings(status: OrderStatus) -> List[str]:
    """Every stored spelling of ``status``, the current one first."""
    legacy = sorted(raw for raw, mapped in LEGACY_ORDER_STATUSES.items() if mapped == status)
    return [status.value] + legacy


def normalize_temp_order_status(value: str) -> Optional[TempOrderStatus]:
    try:
        return TempOrderStatus((value or "").strip().lower())
    except ValueError:
        return None
