from contextlib import contextmanager
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orderdesk.db import session_scope
from orderdesk.errors import RepositoryError
from orderdesk.models.order import ACTIVE_ORDER_INDEX


@dataclass
class OrderFilters:
    """Optional filters for listing orders and temp orders."""

    search: Optional[str] = None        # customer name / phone, substring
    date_from: Optional[datetime] = None  # inclusive
    date_to: Optional[datetime] = None    # exclusive
    status: Optional[str] = None


@dataclass
class Changes:
    """Partial update payload: only fields that are not ``None`` are written."""

    def as_values(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise RepositoryError(operation, exc) from exc


def is_active_order_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from the one-active-order-per-customer index."""
    diag = getattr(exc.orig, "diag", None)
    if getattr(diag, "constraint_name", None) == ACTIVE_ORDER_INDEX:
        return True

    message = str(exc.orig)
    # sqlite names the columns instead of the index
    return ACTIVE_ORDER_INDEX in message or "orders.shop_id, orders.customer_id" in message


class Repository:
    """Shared plumbing: every method may join the caller's session or open one."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, db: Optional[Session], operation: str) -> Iterator[Session]:
        with translate_errors(operation):
            with session_scope(self._session_factory, db) as session:
                yield session
