"""Billing calculator — totals, manual adjustment, balance and profit.

Pure functions over an order's line items, services, advance and manual
final amount. Items need ``quantity``, ``price`` and ``cost``; services need
``amount`` and ``cost``. Inputs are assumed already validated (non-negative);
nothing here clamps or mutates.

Money model::

    total      = sum(quantity * price) + sum(service amount)
    effective  = final_amount if set, else total
    discount   = total - effective        (negative for a surcharge)
    balance    = effective - advance      (negative for an overpayment)

Every figure is rounded to paise (2 places) so that a bill paid in full has
a balance of exactly zero.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from protean.exceptions import ValidationError

MONEY_PLACES = 2


@dataclass(frozen=True)
class Adjustment:
    """A manual bill adjustment expressed both ways."""

    discount: float
    final_amount: float


@dataclass(frozen=True)
class Profitability:
    cost: float
    profit: float
    margin: float


@dataclass(frozen=True)
class BillSummary:
    items_total: float
    services_total: float
    total: float
    final_amount: float | None
    discount: float
    effective_amount: float
    paid: float
    balance: float

    def to_dict(self) -> dict:
        return {
            "items_total": self.items_total,
            "services_total": self.services_total,
            "total": self.total,
            "final_amount": self.final_amount,
            "discount": self.discount,
            "effective_amount": self.effective_amount,
            "paid": self.paid,
            "balance": self.balance,
        }


def money(value: float) -> float:
    return round(value, MONEY_PLACES)


def items_total(items: Iterable) -> float:
    return money(sum((item.quantity * item.price for item in items), 0.0))


def services_total(services: Iterable) -> float:
    return money(sum((service.amount for service in services), 0.0))


def compute_total(items: Iterable, services: Iterable) -> float:
    return money(items_total(items) + services_total(services))


def apply_adjustment(total: float, discount: float | None = None, final_amount: float | None = None) -> Adjustment:
    """Derive the final amount from a discount, or the discount from a final amount."""
    if (discount is None) == (final_amount is None):
        raise ValidationError({"adjustment": ["Provide either a discount or a final amount, not both"]})

    if discount is not None:
        return Adjustment(discount=discount, final_amount=money(total - discount))
    return Adjustment(discount=money(total - final_amount), final_amount=final_amount)


def effective_amount(total: float, final_amount: float | None) -> float:
    return total if final_amount is None else final_amount


def compute_balance(effective: float, advance: float) -> float:
    return money(effective - advance)


def compute_profit(items: Iterable, services: Iterable, effective: float) -> Profitability:
    cost = sum((item.quantity * (item.cost or 0.0) for item in items), 0.0)
    cost += sum((service.cost or 0.0 for service in services), 0.0)
    cost = money(cost)
    profit = money(effective - cost)
    margin = profit / effective if effective else 0.0
    return Profitability(cost=cost, profit=profit, margin=margin)


def summarize(order) -> BillSummary:
    """Bill figures for an order as it stands (items, services, advance, override)."""
    items = list(order.items or [])
    services = list(order.services or [])

    goods = items_total(items)
    extras = services_total(services)
    total = money(goods + extras)
    effective = effective_amount(total, order.final_amount)
    paid = order.advance or 0.0

    return BillSummary(
        items_total=goods,
        services_total=extras,
        total=total,
        final_amount=order.final_amount,
        discount=money(total - effective),
        effective_amount=effective,
        paid=paid,
        balance=compute_balance(effective, paid),
    )
