from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import Query

from orderdesk.repositories.base import OrderFilters


def order_filters(
    search: Optional[str] = Query(None, max_length=120),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
) -> OrderFilters:
    """List filters from the query string; ``date_to`` covers the whole day."""
    return OrderFilters(
        search=search,
        date_from=datetime.combine(date_from, time.min) if date_from else None,
        date_to=datetime.combine(date_to, time.min) + timedelta(days=1) if date_to else None,
        status=status,
    )
