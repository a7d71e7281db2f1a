"""Domain events for the MessageTemplate aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from tailoring.domain import tailoring


@tailoring.event(part_of="MessageTemplate")
class MessageTemplateCreated:
    """A message template was saved for the first time."""

    __version__ = 1

    template_id = Identifier(required=True)
    name = String(required=True)
    template_type = String(required=True)
    variables = Text()  # JSON list
    created_at = DateTime(required=True)


@tailoring.event(part_of="MessageTemplate")
class MessageTemplateUpdated:
    """Name, type or content of a template changed; variables were re-extracted."""

    __version__ = 1

    template_id = Identifier(required=True)
    name = String(required=True)
    template_type = String(required=True)
    variables = Text()  # JSON list
    updated_at = DateTime(required=True)


@tailoring.event(part_of="MessageTemplate")
class MessageTemplateActivated:
    __version__ = 1

    template_id = Identifier(required=True)
    template_type = String(required=True)


@tailoring.event(part_of="MessageTemplate")
class MessageTemplateDeactivated:
    __version__ = 1

    template_id = Identifier(required=True)
    template_type = String(required=True)


@tailoring.event(part_of="MessageTemplate")
class MessageTemplateUsed:
    """A message was composed from this template."""

    __version__ = 1

    template_id = Identifier(required=True)
    usage_count = Integer(required=True)
    used_at = DateTime(required=True)
