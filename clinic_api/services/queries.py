import math
from datetime import date, timedelta
from typing import List, Tuple

from sqlalchemy import and_
from sqlalchemy.orm import Query


def on_day(column, day: date):
    """Half-open ``[day, day + 1)`` range filter for a date or datetime column."""
    return and_(column >= day, column < day + timedelta(days=1))


def paginate(query: Query, page: int, limit: int) -> Tuple[List, int, int]:
    """Return ``(items, total, total_pages)`` for a 1-based page."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    total_pages = math.ceil(total / limit) if limit else 0
    return items, total, total_pages
