"""Order lifecycle — status transitions and the payment gate before delivery.

Any status may move to any other status; reverting an order (for example
from ReadyForDelivery back to Pending after a failed fitting) is a normal
correction. The single rule is the payment gate: moving an order into
Delivered while a positive balance remains needs a decision from the caller,
either money collected now or an explicit skip.

    transition(order, "Delivered")                          -> PaymentRequired(balance)
    transition(order, "Delivered", PaymentDecision.collect(600))  -> committed, advance += 600
    transition(order, "Delivered", PaymentDecision.skip())        -> committed, balance left open

Every commit into Delivered composes the post-delivery message from the
active templates handed to the lifecycle (or the built-in default text).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError

from tailoring.messaging.composer import Notification, compose, order_context
from tailoring.messaging.template import TemplateType
from tailoring.order.billing import summarize
from tailoring.order.order import Order, OrderStatus
from tailoring.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentAction(Enum):
    COLLECT = "Collect"
    SKIP = "Skip"


@dataclass(frozen=True)
class PaymentDecision:
    """How the caller resolves an outstanding balance at delivery."""

    action: PaymentAction
    amount: float = 0.0

    @classmethod
    def collect(cls, amount: float) -> "PaymentDecision":
        return cls(action=PaymentAction.COLLECT, amount=amount)

    @classmethod
    def skip(cls) -> "PaymentDecision":
        return cls(action=PaymentAction.SKIP)


@dataclass(frozen=True)
class PaymentRequired:
    """Delivery is on hold until the caller decides about ``balance``."""

    balance: float


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    notification: Notification | None = None
    pending_payment: PaymentRequired | None = None

    @property
    def committed(self) -> bool:
        return self.pending_payment is None

    def to_dict(self) -> dict:
        return {
            "order_id": str(self.order.id),
            "status": self.order.status,
            "committed": self.committed,
            "payment_required": (
                {"balance": self.pending_payment.balance} if self.pending_payment is not None else None
            ),
            "notification": (
                {
                    "template_type": self.notification.template_type,
                    "body": self.notification.body,
                    "from_default": self.notification.from_default,
                }
                if self.notification is not None
                else None
            ),
        }


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError(
            {"status": [f"'{value}' is not a valid order status. Expected one of: {allowed}"]}
        ) from None


def _check_collected(decision: PaymentDecision) -> None:
    if decision.amount is None or decision.amount <= 0:
        raise ValidationError({"amount": ["Collected amount must be greater than zero"]})


class OrderLifecycle:
    """Applies status transitions to an order.

    ``templates`` maps template type values (e.g. ``"PostDelivery"``) to the
    content of the active template of that type. Types missing from the map
    fall back to the built-in texts.
    """

    def __init__(self, templates: Mapping[str, str] | None = None):
        self.templates = dict(templates or {})

    def transition(
        self,
        order: Order,
        target_status,
        decision: PaymentDecision | None = None,
        context: Mapping[str, object] | None = None,
    ) -> TransitionResult:
        target = parse_status(target_status)
        current = OrderStatus(order.status)

        if target == current:
            return TransitionResult(order=order)

        if target != OrderStatus.DELIVERED:
            order.change_status(target)
            logger.info("Order status changed", order_id=str(order.id), previous=current.value, status=target.value)
            return TransitionResult(order=order)

        balance = summarize(order).balance
        if balance > 0:
            if decision is None:
                logger.info("Delivery held for payment decision", order_id=str(order.id), balance=balance)
                return TransitionResult(order=order, pending_payment=PaymentRequired(balance=balance))

            if decision.action == PaymentAction.COLLECT:
                _check_collected(decision)
                order.record_payment(decision.amount)
            else:
                logger.warning("Payment collection skipped at delivery", order_id=str(order.id), balance=balance)

        order.change_status(OrderStatus.DELIVERED)
        notification = self._post_delivery_notification(order, context)
        logger.info(
            "Order delivered",
            order_id=str(order.id),
            previous=current.value,
            outstanding_balance=summarize(order).balance,
        )
        return TransitionResult(order=order, notification=notification)

    def _post_delivery_notification(self, order: Order, context: Mapping[str, object] | None) -> Notification:
        merged = {**order_context(order), **{k: v for k, v in (context or {}).items() if v is not None}}
        return compose(TemplateType.POST_DELIVERY, merged, self.templates)
