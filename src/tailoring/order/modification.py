"""Order modification — items, bill adjustment, payments and scheduling."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, Float, Identifier, Text
from protean.utils.globals import current_domain

from tailoring.domain import logger, tailoring
from tailoring.order.order import Order


@tailoring.command(part_of="Order")
class ReviseOrderItems:
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {garment_type, quantity, price, cost}
    services = Text()  # JSON: list of {description, amount, cost}; omitted keeps services as they are


@tailoring.command(part_of="Order")
class AdjustBill:
    order_id = Identifier(required=True)
    discount = Float()
    final_amount = Float()
    clear = Boolean(default=False)


@tailoring.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    amount = Float(required=True)


@tailoring.command(part_of="Order")
class ScheduleOrder:
    order_id = Identifier(required=True)
    trial_date = Date()
    delivery_date = Date()


@tailoring.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(ReviseOrderItems)
    def revise_items(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        services = json.loads(command.services) if isinstance(command.services, str) else command.services
        order.revise_items(items, services)
        repo.add(order)

    @handle(AdjustBill)
    def adjust_bill(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if command.clear:
            order.clear_adjustment()
        else:
            order.adjust_bill(discount=command.discount, final_amount=command.final_amount)
        repo.add(order)

    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment(command.amount)
        repo.add(order)
        logger.info("Payment recorded", order_id=str(order.id), amount=command.amount, advance=order.advance)

    @handle(ScheduleOrder)
    def schedule(self, command):
        if command.trial_date is None and command.delivery_date is None:
            raise ValidationError({"schedule": ["Provide a trial date, a delivery date, or both"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.schedule(trial_date=command.trial_date, delivery_date=command.delivery_date)
        repo.add(order)
