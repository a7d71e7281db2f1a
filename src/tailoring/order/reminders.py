"""Reminder sweeps over loaded orders.

The daily sweep looks a fixed number of days ahead for trial fittings and
deliveries of orders that are not yet Delivered; the re-engagement sweep
finds clients whose most recent order is older than a window.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from tailoring.order.order import OrderStatus

DEFAULT_DAYS_AHEAD = 2
DEFAULT_INACTIVITY_DAYS = 30


@dataclass
class UpcomingReminders:
    trials: list = field(default_factory=list)
    deliveries: list = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.trials or self.deliveries)


def _as_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def upcoming_reminders(orders: Iterable, today: date, days_ahead: int = DEFAULT_DAYS_AHEAD) -> UpcomingReminders:
    target = today + timedelta(days=days_ahead)
    reminders = UpcomingReminders()

    for order in orders:
        if order.status == OrderStatus.DELIVERED.value:
            continue
        if _as_date(order.trial_date) == target:
            reminders.trials.append(order)
        if _as_date(order.delivery_date) == target:
            reminders.deliveries.append(order)

    return reminders


def inactive_clients(orders: Iterable, today: date, days: int = DEFAULT_INACTIVITY_DAYS) -> list[str]:
    """Client ids whose latest order was placed more than ``days`` ago."""
    cutoff = today - timedelta(days=days)
    latest: dict[str, date] = {}

    for order in orders:
        placed = _as_date(order.created_at)
        if placed is None:
            continue
        client_id = str(order.client_id)
        if client_id not in latest or placed > latest[client_id]:
            latest[client_id] = placed

    return sorted(client_id for client_id, placed in latest.items() if placed < cutoff)
