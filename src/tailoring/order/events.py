"""Domain events for the Order aggregate.

Each event is an immutable fact about one order. Amounts are the raw numbers
after the change; list payloads are serialized as JSON text.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from tailoring.domain import tailoring


@tailoring.event(part_of="Order")
class OrderCreated:
    """An order was taken for a client."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(max_length=20)
    client_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    services = Text()  # JSON: list of service dicts
    total_amount = Float(required=True)
    final_amount = Float()
    advance = Float()
    created_at = DateTime(required=True)


@tailoring.event(part_of="Order")
class OrderItemsRevised:
    """Line items and/or additional services were replaced; total recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON
    services = Text()  # JSON
    total_amount = Float(required=True)


@tailoring.event(part_of="Order")
class BillAdjusted:
    """A discount (or surcharge) was applied by setting the final amount."""

    __version__ = 1

    order_id = Identifier(required=True)
    total_amount = Float(required=True)
    discount = Float(required=True)
    final_amount = Float(required=True)


@tailoring.event(part_of="Order")
class BillAdjustmentCleared:
    __version__ = 1

    order_id = Identifier(required=True)
    total_amount = Float(required=True)


@tailoring.event(part_of="Order")
class PaymentReceived:
    """Money was received against the order and added to the advance."""

    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    advance = Float(required=True)
    balance = Float(required=True)
    received_at = DateTime(required=True)


@tailoring.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@tailoring.event(part_of="Order")
class OrderDelivered:
    """The order was handed over. A positive balance means collection was skipped."""

    __version__ = 1

    order_id = Identifier(required=True)
    outstanding_balance = Float(required=True)
    delivered_at = DateTime(required=True)


@tailoring.event(part_of="Order")
class MeasurementsUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    measurements = Text()


@tailoring.event(part_of="Order")
class OrderScheduled:
    """Trial and/or delivery dates were set or moved."""

    __version__ = 1

    order_id = Identifier(required=True)
    trial_date = String()  # ISO date
    delivery_date = String()  # ISO date


@tailoring.event(part_of="Order")
class SpecialRequirementAdded:
    __version__ = 1

    order_id = Identifier(required=True)
    requirement_id = Identifier(required=True)
    note = Text(required=True)


@tailoring.event(part_of="Order")
class SpecialRequirementRemoved:
    __version__ = 1

    order_id = Identifier(required=True)
    requirement_id = Identifier(required=True)


@tailoring.event(part_of="Order")
class TrialNoteAdded:
    """A fitting observation was recorded. Trial notes are never edited in place."""

    __version__ = 1

    order_id = Identifier(required=True)
    note_id = Identifier(required=True)
    note = Text(required=True)
    noted_at = DateTime(required=True)
