"""MessageTemplate aggregate (CQRS) — reusable message text with placeholders.

A template's variable list is derived from its content and recomputed every
time the content changes. Only active templates are offered when a message is
composed; for each template type the most recently updated active template
wins, and built-in defaults cover types with no active template.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text

from tailoring.domain import tailoring
from tailoring.messaging.events import (
    MessageTemplateActivated,
    MessageTemplateCreated,
    MessageTemplateDeactivated,
    MessageTemplateUpdated,
    MessageTemplateUsed,
)
from tailoring.messaging.renderer import extract_variables, render

MIN_CONTENT_LENGTH = 10


class TemplateType(Enum):
    ORDER_CONFIRMATION = "OrderConfirmation"
    ORDER_READY = "OrderReady"
    POST_DELIVERY = "PostDelivery"
    TRIAL_REMINDER = "TrialReminder"
    DELIVERY_REMINDER = "DeliveryReminder"
    PAYMENT_REMINDER = "PaymentReminder"
    INACTIVE_CLIENT = "InactiveClient"
    CUSTOM = "Custom"


def parse_template_type(value) -> TemplateType:
    try:
        return TemplateType(value)
    except ValueError:
        raise ValidationError({"template_type": [f"'{value}' is not a valid template type"]}) from None


def _checked_variables(content) -> list[str]:
    variables = extract_variables(content)
    if len(content.strip()) < MIN_CONTENT_LENGTH:
        raise ValidationError({"content": [f"Content must be at least {MIN_CONTENT_LENGTH} characters"]})
    return variables


@tailoring.aggregate
class MessageTemplate:
    name = String(required=True, min_length=3, max_length=100, unique=True)
    template_type = String(required=True, choices=TemplateType)
    content = Text(required=True)
    variables = Text()  # JSON list of placeholder names
    is_active = Boolean(default=True)
    usage_count = Integer(default=0)
    last_used_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, template_type, content, is_active=True):
        template_type = parse_template_type(template_type)
        variables = _checked_variables(content)
        now = datetime.now(UTC)

        template = cls(
            name=name.strip(),
            template_type=template_type.value,
            content=content,
            variables=json.dumps(variables),
            is_active=is_active,
            usage_count=0,
            created_at=now,
            updated_at=now,
        )
        template.raise_(
            MessageTemplateCreated(
                template_id=str(template.id),
                name=template.name,
                template_type=template.template_type,
                variables=template.variables,
                created_at=now,
            )
        )
        return template

    # -------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------
    def update(self, name=None, template_type=None, content=None):
        """Change any of name, type and content; variables follow the content."""
        if content is not None:
            variables = _checked_variables(content)
            self.content = content
            self.variables = json.dumps(variables)
        if template_type is not None:
            self.template_type = parse_template_type(template_type).value
        if name is not None:
            self.name = name.strip()

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            MessageTemplateUpdated(
                template_id=str(self.id),
                name=self.name,
                template_type=self.template_type,
                variables=self.variables,
                updated_at=now,
            )
        )

    def activate(self):
        if self.is_active:
            return
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self.raise_(MessageTemplateActivated(template_id=str(self.id), template_type=self.template_type))

    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(MessageTemplateDeactivated(template_id=str(self.id), template_type=self.template_type))

    # -------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------
    def get_variables(self) -> list[str]:
        return json.loads(self.variables) if self.variables else []

    def render(self, context) -> str:
        return render(self.content, context)

    def record_usage(self):
        now = datetime.now(UTC)
        self.usage_count = (self.usage_count or 0) + 1
        self.last_used_at = now
        self.raise_(
            MessageTemplateUsed(
                template_id=str(self.id),
                usage_count=self.usage_count,
                used_at=now,
            )
        )
