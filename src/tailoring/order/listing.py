"""Order listing: filter loaded orders, newest first, one page at a time."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_EARLIEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class OrderPage:
    orders: list = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def _placed_on(order) -> date | None:
    return order.created_at.date() if order.created_at else None


def _matches(order, status, client_id, start_date, end_date) -> bool:
    if status is not None and order.status != status:
        return False
    if client_id is not None and str(order.client_id) != str(client_id):
        return False
    if start_date is not None or end_date is not None:
        placed = _placed_on(order)
        if placed is None:
            return False
        if start_date is not None and placed < start_date:
            return False
        if end_date is not None and placed > end_date:
            return False
    return True


def find_orders(
    orders: Iterable,
    status: str | None = None,
    client_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> OrderPage:
    """Orders matching every given filter, newest first.

    The date range is inclusive on both ends and compares the day the order
    was placed.
    """
    matching = [order for order in orders if _matches(order, status, client_id, start_date, end_date)]
    matching.sort(key=lambda order: order.created_at or _EARLIEST, reverse=True)

    offset = (page - 1) * limit
    return OrderPage(orders=matching[offset : offset + limit], page=page, limit=limit, total=len(matching))
