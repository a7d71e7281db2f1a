"""Order aggregate (CQRS) — the financial and workflow record of one client order.

The order owns its line items, additional services, special requirements and
trial notes. ``total_amount`` is always derived from items and services and
is recomputed on every change to either; ``final_amount`` is an optional
manual override (discount or surcharge) and ``advance`` accumulates money
received.

Status lifecycle (5 states, see ``tailoring.order.lifecycle``):
    Pending → InProgress → ReadyForTrial → ReadyForDelivery → Delivered

Movement between states is unrestricted; the only rule is the payment gate
applied by the lifecycle before an order enters Delivered.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, HasMany, Identifier, Integer, String, Text

from tailoring.domain import tailoring
from tailoring.order.billing import apply_adjustment, compute_total, money, summarize
from tailoring.order.events import (
    BillAdjusted,
    BillAdjustmentCleared,
    MeasurementsUpdated,
    OrderCreated,
    OrderDelivered,
    OrderItemsRevised,
    OrderScheduled,
    OrderStatusChanged,
    PaymentReceived,
    SpecialRequirementAdded,
    SpecialRequirementRemoved,
    TrialNoteAdded,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    READY_FOR_TRIAL = "ReadyForTrial"
    READY_FOR_DELIVERY = "ReadyForDelivery"
    DELIVERED = "Delivered"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@tailoring.entity(part_of="Order")
class OrderItem:
    """A garment line: what is stitched, how many, and at what price.

    ``cost`` is the shop's own cost per unit, used only for profit figures.
    """

    garment_type = String(required=True, max_length=100)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    cost = Float(default=0.0, min_value=0.0)

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price


@tailoring.entity(part_of="Order")
class AdditionalService:
    """Extra work billed on top of the garments (lining, embroidery, express)."""

    description = String(required=True, max_length=200)
    amount = Float(required=True, min_value=0.0)
    cost = Float(default=0.0, min_value=0.0)


@tailoring.entity(part_of="Order")
class SpecialRequirement:
    note = Text(required=True)
    images = Text()  # JSON: list of {"url", "key"} references


@tailoring.entity(part_of="Order")
class TrialNote:
    note = Text(required=True)
    images = Text()  # JSON: list of {"url", "key"} references
    noted_at = DateTime()


def _build_items(items_data):
    return [
        OrderItem(
            garment_type=item.get("garment_type"),
            quantity=item.get("quantity"),
            price=item.get("price"),
            cost=item.get("cost") or 0.0,
        )
        for item in items_data
    ]


def _build_services(services_data):
    return [
        AdditionalService(
            description=service.get("description"),
            amount=service.get("amount"),
            cost=service.get("cost") or 0.0,
        )
        for service in services_data
        # Empty rows are left over from the order form
        if service.get("description")
    ]


def _items_json(items):
    return json.dumps(
        [
            {"garment_type": i.garment_type, "quantity": i.quantity, "price": i.price, "cost": i.cost}
            for i in items
        ]
    )


def _services_json(services):
    return json.dumps([{"description": s.description, "amount": s.amount, "cost": s.cost} for s in services])


def _clean_note(note):
    note = (note or "").strip()
    if not note:
        raise ValidationError({"note": ["Note is required"]})
    return note


def _images_json(images):
    return json.dumps([{"url": image.get("url"), "key": image.get("key")} for image in (images or [])])


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@tailoring.aggregate
class Order:
    order_number = String(max_length=20)
    client_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    services = HasMany(AdditionalService)
    special_requirements = HasMany(SpecialRequirement)
    trial_notes = HasMany(TrialNote)
    total_amount = Float(default=0.0, min_value=0.0)
    final_amount = Float(min_value=0.0)
    advance = Float(default=0.0, min_value=0.0)
    measurements = Text()
    trial_date = Date()
    delivery_date = Date()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        client_id,
        items_data,
        services_data=None,
        order_number=None,
        advance=0.0,
        final_amount=None,
        measurements=None,
        trial_date=None,
        delivery_date=None,
    ):
        """Take a new order in Pending state with its total computed from items and services.

        Args:
            client_id: The client the order is for.
            items_data: List of dicts with garment_type, quantity, price and
                optionally cost. At least one is required.
            services_data: List of dicts with description, amount and
                optionally cost.
            final_amount: Optional manual override of the total.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must have at least one item"]})

        items = _build_items(items_data)
        services = _build_services(services_data or [])
        total = compute_total(items, services)
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            client_id=client_id,
            status=OrderStatus.PENDING.value,
            items=items,
            services=services,
            total_amount=total,
            final_amount=final_amount,
            advance=advance or 0.0,
            measurements=measurements,
            trial_date=trial_date,
            delivery_date=delivery_date,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order.order_number,
                client_id=str(client_id),
                items=_items_json(items),
                services=_services_json(services),
                total_amount=total,
                final_amount=final_amount,
                advance=order.advance,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Billing
    # -------------------------------------------------------------------
    def recalculate_total(self) -> float:
        self.total_amount = compute_total(self.items or [], self.services or [])
        return self.total_amount

    def revise_items(self, items_data, services_data=None):
        """Replace the line items (and services, when given) and recompute the total.

        A manual final amount is kept as entered; the discount it implies
        moves with the new total.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must have at least one item"]})

        items = _build_items(items_data)
        services = _build_services(services_data) if services_data is not None else None

        for item in list(self.items or []):
            self.remove_items(item)
        self.add_items(items)
        if services is not None:
            for service in list(self.services or []):
                self.remove_services(service)
            if services:
                self.add_services(services)
        self.recalculate_total()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderItemsRevised(
                order_id=str(self.id),
                items=_items_json(self.items),
                services=_services_json(self.services or []),
                total_amount=self.total_amount,
            )
        )

    def adjust_bill(self, discount=None, final_amount=None):
        """Set the final amount directly or through a discount off the total.

        A final amount above the total (a surcharge) is accepted.
        """
        adjustment = apply_adjustment(self.total_amount, discount=discount, final_amount=final_amount)
        if adjustment.final_amount < 0:
            raise ValidationError({"final_amount": ["Final amount cannot be negative"]})

        self.final_amount = adjustment.final_amount
        self.updated_at = datetime.now(UTC)

        self.raise_(
            BillAdjusted(
                order_id=str(self.id),
                total_amount=self.total_amount,
                discount=adjustment.discount,
                final_amount=adjustment.final_amount,
            )
        )
        return adjustment

    def clear_adjustment(self):
        if self.final_amount is None:
            return
        self.final_amount = None
        self.updated_at = datetime.now(UTC)
        self.raise_(BillAdjustmentCleared(order_id=str(self.id), total_amount=self.total_amount))

    def record_payment(self, amount):
        """Add money received to the advance."""
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be greater than zero"]})

        now = datetime.now(UTC)
        self.advance = money((self.advance or 0.0) + amount)
        self.updated_at = now

        self.raise_(
            PaymentReceived(
                order_id=str(self.id),
                amount=amount,
                advance=self.advance,
                balance=summarize(self).balance,
                received_at=now,
            )
        )

    @property
    def balance(self) -> float:
        return summarize(self).balance

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def change_status(self, new_status: OrderStatus):
        """Move to ``new_status`` unconditionally. Gate checks live in the lifecycle.

        ``delivered_at`` is stamped on entering Delivered and cleared when a
        delivered order is moved back.
        """
        previous = self.status
        if previous == new_status.value:
            return

        now = datetime.now(UTC)
        self.status = new_status.value
        self.updated_at = now
        if previous == OrderStatus.DELIVERED.value:
            self.delivered_at = None

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=new_status.value,
                changed_at=now,
            )
        )

        if new_status == OrderStatus.DELIVERED:
            self.delivered_at = now
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    outstanding_balance=summarize(self).balance,
                    delivered_at=now,
                )
            )

    # -------------------------------------------------------------------
    # Measurements, dates and notes
    # -------------------------------------------------------------------
    def update_measurements(self, measurements: str):
        self.measurements = measurements
        self.updated_at = datetime.now(UTC)
        self.raise_(MeasurementsUpdated(order_id=str(self.id), measurements=measurements))

    def schedule(self, trial_date=None, delivery_date=None):
        if trial_date is not None:
            self.trial_date = trial_date
        if delivery_date is not None:
            self.delivery_date = delivery_date
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderScheduled(
                order_id=str(self.id),
                trial_date=self.trial_date.isoformat() if self.trial_date else None,
                delivery_date=self.delivery_date.isoformat() if self.delivery_date else None,
            )
        )

    def add_special_requirement(self, note, images=None):
        requirement = SpecialRequirement(note=_clean_note(note), images=_images_json(images))
        self.add_special_requirements(requirement)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            SpecialRequirementAdded(
                order_id=str(self.id),
                requirement_id=str(requirement.id),
                note=requirement.note,
            )
        )
        return requirement

    def remove_special_requirement(self, requirement_id):
        requirement = next((r for r in self.special_requirements if str(r.id) == str(requirement_id)), None)
        if requirement is None:
            raise ValidationError({"requirement_id": ["Special requirement not found"]})

        self.remove_special_requirements(requirement)
        self.updated_at = datetime.now(UTC)
        self.raise_(SpecialRequirementRemoved(order_id=str(self.id), requirement_id=str(requirement_id)))

    def add_trial_note(self, note, images=None):
        now = datetime.now(UTC)
        trial_note = TrialNote(note=_clean_note(note), images=_images_json(images), noted_at=now)
        self.add_trial_notes(trial_note)
        self.updated_at = now

        self.raise_(
            TrialNoteAdded(
                order_id=str(self.id),
                note_id=str(trial_note.id),
                note=trial_note.note,
                noted_at=now,
            )
        )
        return trial_note
