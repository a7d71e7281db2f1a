"""Order status updates and order messages — commands and handler.

``UpdateOrderStatus`` is where the lifecycle meets persistence: the active
templates are loaded once, handed to the lifecycle, and the order is only
saved when the transition commits. A delivery held at the payment gate
leaves the stored order untouched.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from tailoring.domain import logger, tailoring
from tailoring.messaging.composer import (
    compose,
    load_active_templates,
    order_context,
    record_template_usage,
    template_contents,
)
from tailoring.order.lifecycle import OrderLifecycle, PaymentDecision
from tailoring.order.order import Order


@tailoring.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    received_amount = Float()
    skip_payment = Boolean(default=False)
    client_name = String(max_length=100)


@tailoring.command(part_of="Order")
class ComposeOrderMessage:
    order_id = Identifier(required=True)
    template_type = String(required=True, max_length=50)
    client_name = String(max_length=100)


def _payment_decision(command):
    if command.received_amount is not None and command.skip_payment:
        raise ValidationError({"payment": ["Either record a received amount or skip payment, not both"]})
    if command.received_amount is not None:
        return PaymentDecision.collect(command.received_amount)
    if command.skip_payment:
        return PaymentDecision.skip()
    return None


@tailoring.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        decision = _payment_decision(command)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        active = load_active_templates()
        lifecycle = OrderLifecycle(templates=template_contents(active))
        result = lifecycle.transition(
            order,
            command.status,
            decision=decision,
            context={"clientName": command.client_name},
        )

        if result.committed:
            repo.add(order)
            record_template_usage(active, result.notification)
        else:
            logger.info(
                "Status update awaiting payment decision",
                order_id=str(order.id),
                balance=result.pending_payment.balance,
            )

        return result.to_dict()

    @handle(ComposeOrderMessage)
    def compose_message(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        active = load_active_templates()

        notification = compose(
            command.template_type,
            order_context(order, client_name=command.client_name),
            template_contents(active),
        )
        record_template_usage(active, notification)

        return {
            "order_id": str(order.id),
            "template_type": notification.template_type,
            "body": notification.body,
            "from_default": notification.from_default,
        }
