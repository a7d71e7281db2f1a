"""Message composition — pick a template for a type and render it for an order.

The composer is where order values are turned into display strings; the
renderer itself only substitutes text.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from tailoring.messaging.defaults import DEFAULT_TEMPLATES, shop_name
from tailoring.messaging.renderer import render
from tailoring.messaging.template import MessageTemplate, parse_template_type
from tailoring.order.billing import summarize


@dataclass(frozen=True)
class Notification:
    """Rendered message text, ready for a dispatcher to send."""

    template_type: str
    body: str
    from_default: bool = False


def format_amount(value) -> str | None:
    if value is None:
        return None
    return f"{value:,.2f}"


def format_date(value) -> str | None:
    if value is None:
        return None
    return value.strftime("%d %b %Y")


def order_context(order, client_name=None) -> dict[str, str]:
    """Display-ready placeholder values for one order."""
    bill = summarize(order)
    context = {
        "shopName": shop_name(),
        "orderNumber": order.order_number,
        "clientName": client_name,
        "totalAmount": format_amount(bill.total),
        "finalAmount": format_amount(bill.effective_amount),
        "discount": format_amount(bill.discount),
        "advance": format_amount(bill.paid),
        "balance": format_amount(bill.balance),
        "trialDate": format_date(order.trial_date),
        "deliveryDate": format_date(order.delivery_date),
        "status": order.status,
    }
    return {key: value for key, value in context.items() if value is not None}


def compose(template_type, context: Mapping[str, object], templates: Mapping[str, str] | None = None) -> Notification:
    """Render the active template for ``template_type``, or its built-in default.

    ``templates`` maps template type values to the content of the active
    template of that type.
    """
    key = parse_template_type(template_type).value
    content = (templates or {}).get(key)
    from_default = content is None

    if from_default:
        content = DEFAULT_TEMPLATES.get(key)
        if content is None:
            raise ValidationError({"template_type": [f"No active template of type {key}"]})

    merged = {"shopName": shop_name(), **context}
    return Notification(template_type=key, body=render(content, merged), from_default=from_default)


def load_active_templates() -> dict[str, MessageTemplate]:
    """Active templates by type; the most recently updated one wins a tie."""
    repo = current_domain.repository_for(MessageTemplate)
    active = repo._dao.query.filter(is_active=True).all().items

    chosen: dict[str, MessageTemplate] = {}
    for template in sorted(active, key=lambda t: t.updated_at or t.created_at):
        chosen[template.template_type] = template
    return chosen


def template_contents(templates: Mapping[str, MessageTemplate]) -> dict[str, str]:
    return {template_type: template.content for template_type, template in templates.items()}


def record_template_usage(templates: Mapping[str, MessageTemplate], notification: Notification | None) -> None:
    """Count a use of the stored template a notification was rendered from."""
    if notification is None or notification.from_default:
        return
    template = templates[notification.template_type]
    template.record_usage()
    current_domain.repository_for(MessageTemplate).add(template)
