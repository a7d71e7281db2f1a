"""Message template management — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from tailoring.domain import logger, tailoring
from tailoring.messaging.template import MessageTemplate


@tailoring.command(part_of="MessageTemplate")
class CreateMessageTemplate:
    name = String(required=True, max_length=100)
    template_type = String(required=True, max_length=50)
    content = Text(required=True)
    is_active = Boolean(default=True)


@tailoring.command(part_of="MessageTemplate")
class UpdateMessageTemplate:
    template_id = Identifier(required=True)
    name = String(max_length=100)
    template_type = String(max_length=50)
    content = Text()


@tailoring.command(part_of="MessageTemplate")
class ActivateMessageTemplate:
    template_id = Identifier(required=True)


@tailoring.command(part_of="MessageTemplate")
class DeactivateMessageTemplate:
    template_id = Identifier(required=True)


@tailoring.command_handler(part_of=MessageTemplate)
class MessageTemplateHandler:
    @handle(CreateMessageTemplate)
    def create_template(self, command):
        template = MessageTemplate.create(
            name=command.name,
            template_type=command.template_type,
            content=command.content,
            is_active=True if command.is_active is None else command.is_active,
        )
        current_domain.repository_for(MessageTemplate).add(template)
        logger.info(
            "Message template created",
            template_id=str(template.id),
            template_type=template.template_type,
            variables=template.get_variables(),
        )
        return str(template.id)

    @handle(UpdateMessageTemplate)
    def update_template(self, command):
        repo = current_domain.repository_for(MessageTemplate)
        template = repo.get(command.template_id)
        template.update(
            name=command.name,
            template_type=command.template_type,
            content=command.content,
        )
        repo.add(template)

    @handle(ActivateMessageTemplate)
    def activate_template(self, command):
        repo = current_domain.repository_for(MessageTemplate)
        template = repo.get(command.template_id)
        template.activate()
        repo.add(template)

    @handle(DeactivateMessageTemplate)
    def deactivate_template(self, command):
        repo = current_domain.repository_for(MessageTemplate)
        template = repo.get(command.template_id)
        template.deactivate()
        repo.add(template)
