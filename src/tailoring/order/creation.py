"""Order creation — command and handler.

A new order gets the next sequential order number and an order confirmation
message, rendered from the active OrderConfirmation template or the built-in
text.
"""

import json
import re
from datetime import UTC, datetime

from protean import handle
from protean.fields import Date, Float, Identifier, Text
from protean.utils.globals import current_domain

from tailoring.domain import logger, tailoring
from tailoring.measurements.codec import coerce_text
from tailoring.messaging.composer import (
    Notification,
    compose,
    load_active_templates,
    order_context,
    record_template_usage,
    template_contents,
)
from tailoring.messaging.template import TemplateType
from tailoring.order.order import Order

ORDER_NUMBER_PREFIX = "TD"


def next_order_number(existing_numbers, year: int) -> str:
    """Next sequential number for ``year``, e.g. TD-2026-0007 after TD-2026-0006."""
    pattern = re.compile(rf"^{ORDER_NUMBER_PREFIX}-{year}-(\d+)$")
    highest = max(
        (int(match.group(1)) for number in existing_numbers if number and (match := pattern.match(number))),
        default=0,
    )
    return f"{ORDER_NUMBER_PREFIX}-{year}-{highest + 1:04d}"


def compose_confirmation(order) -> Notification:
    """Render the confirmation for a new order and count the template used."""
    active = load_active_templates()
    notification = compose(TemplateType.ORDER_CONFIRMATION, order_context(order), template_contents(active))
    record_template_usage(active, notification)
    return notification


def _load_json(value, default):
    if value is None:
        return default
    return json.loads(value) if isinstance(value, str) else value


@tailoring.command(part_of="Order")
class CreateOrder:
    client_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {garment_type, quantity, price, cost}
    services = Text()  # JSON: list of {description, amount, cost}
    special_requirements = Text()  # JSON: list of {note, images}
    measurements = Text()
    advance = Float(default=0.0, min_value=0.0)
    final_amount = Float(min_value=0.0)
    discount = Float()
    trial_date = Date()
    delivery_date = Date()


@tailoring.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        repo = current_domain.repository_for(Order)
        existing = [order.order_number for order in repo._dao.query.all().items]
        order_number = next_order_number(existing, datetime.now(UTC).year)

        order = Order.create(
            client_id=command.client_id,
            items_data=_load_json(command.items, []),
            services_data=_load_json(command.services, []),
            order_number=order_number,
            advance=command.advance or 0.0,
            final_amount=command.final_amount,
            measurements=coerce_text(command.measurements) or None,
            trial_date=command.trial_date,
            delivery_date=command.delivery_date,
        )

        if command.discount is not None and command.final_amount is None:
            order.adjust_bill(discount=command.discount)

        for requirement in _load_json(command.special_requirements, []):
            if (requirement.get("note") or "").strip():
                order.add_special_requirement(requirement["note"], requirement.get("images"))

        repo.add(order)
        logger.info(
            "Order created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=order.total_amount,
        )

        confirmation = compose_confirmation(order)
        logger.info(
            "Order confirmation composed",
            order_id=str(order.id),
            from_default=confirmation.from_default,
            body=confirmation.body,
        )
        return str(order.id)
