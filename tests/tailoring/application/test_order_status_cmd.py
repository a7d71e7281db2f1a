"""Application tests for status updates and order messages."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from tailoring.messaging.management import CreateMessageTemplate
from tailoring.messaging.template import MessageTemplate
from tailoring.order.creation import CreateOrder
from tailoring.order.order import Order, OrderStatus
from tailoring.order.status import ComposeOrderMessage, UpdateOrderStatus


def _create_order(advance=400.0):
    command = CreateOrder(
        client_id="client-001",
        items=json.dumps([{"garment_type": "Shirt", "quantity": 2, "price": 500.0}]),
        services=json.dumps([{"description": "Express stitching", "amount": 200.0}]),
        discount=200.0,
        advance=advance,
    )
    return current_domain.process(command, asynchronous=False)


def _update_status(order_id, status, **kwargs):
    command = UpdateOrderStatus(order_id=order_id, status=status, **kwargs)
    return current_domain.process(command, asynchronous=False)


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestUpdateOrderStatus:
    def test_plain_transition_saved(self):
        order_id = _create_order()
        result = _update_status(order_id, "ReadyForTrial")

        assert result["committed"] is True
        assert _load(order_id).status == OrderStatus.READY_FOR_TRIAL.value

    def test_delivery_held_for_payment(self):
        order_id = _create_order()
        result = _update_status(order_id, "Delivered")

        assert result["committed"] is False
        assert result["payment_required"] == {"balance": 600.0}
        assert _load(order_id).status == OrderStatus.PENDING.value

    def test_delivery_with_received_amount(self):
        order_id = _create_order()
        result = _update_status(order_id, "Delivered", received_amount=600.0)

        order = _load(order_id)
        assert result["committed"] is True
        assert order.status == OrderStatus.DELIVERED.value
        assert order.advance == 1000.0
        assert order.delivered_at is not None
        assert result["notification"]["from_default"] is True

    def test_delivery_with_skip(self):
        order_id = _create_order()
        _update_status(order_id, "Delivered", skip_payment=True)

        order = _load(order_id)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.advance == 400.0
        assert order.balance == 600.0

    def test_settled_order_delivers_without_decision(self):
        order_id = _create_order(advance=1000.0)
        result = _update_status(order_id, "Delivered")

        assert result["committed"] is True
        assert _load(order_id).status == OrderStatus.DELIVERED.value

    def test_received_and_skip_together_rejected(self):
        order_id = _create_order()
        with pytest.raises(ValidationError):
            _update_status(order_id, "Delivered", received_amount=600.0, skip_payment=True)

    def test_invalid_status_rejected(self):
        order_id = _create_order()
        with pytest.raises(ValidationError):
            _update_status(order_id, "Shipped")

    def test_active_template_rendered_and_counted(self):
        template_id = current_domain.process(
            CreateMessageTemplate(
                name="Delivery thanks",
                template_type="PostDelivery",
                content="Dear {{clientName}}, order {{orderNumber}} is delivered.",
            ),
            asynchronous=False,
        )
        order_id = _create_order(advance=1000.0)

        result = _update_status(order_id, "Delivered", client_name="Asha")

        order_number = _load(order_id).order_number
        assert result["notification"]["body"] == f"Dear Asha, order {order_number} is delivered."
        assert result["notification"]["from_default"] is False
        assert current_domain.repository_for(MessageTemplate).get(template_id).usage_count == 1


class TestComposeOrderMessage:
    def test_default_text(self):
        order_id = _create_order()
        message = current_domain.process(
            ComposeOrderMessage(order_id=order_id, template_type="PaymentReminder", client_name="Asha"),
            asynchronous=False,
        )

        assert message["from_default"] is True
        assert "Dear Asha" in message["body"]
        assert "Rs 600.00" in message["body"]

    def test_custom_without_template_rejected(self):
        order_id = _create_order()
        with pytest.raises(ValidationError):
            current_domain.process(
                ComposeOrderMessage(order_id=order_id, template_type="Custom"),
                asynchronous=False,
            )
