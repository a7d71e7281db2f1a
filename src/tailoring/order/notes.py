"""Special requirements and trial notes — commands and handler.

Image references are stored as given (``{"url", "key"}`` pairs); uploading
the files is the caller's business.
"""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from tailoring.domain import tailoring
from tailoring.order.order import Order


@tailoring.command(part_of="Order")
class AddSpecialRequirement:
    order_id = Identifier(required=True)
    note = Text(required=True)
    images = Text()  # JSON: list of {url, key}


@tailoring.command(part_of="Order")
class RemoveSpecialRequirement:
    order_id = Identifier(required=True)
    requirement_id = Identifier(required=True)


@tailoring.command(part_of="Order")
class AddTrialNote:
    order_id = Identifier(required=True)
    note = Text(required=True)
    images = Text()  # JSON: list of {url, key}


def _images(value):
    if not value:
        return []
    return json.loads(value) if isinstance(value, str) else value


@tailoring.command_handler(part_of=Order)
class OrderNotesHandler:
    @handle(AddSpecialRequirement)
    def add_requirement(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        requirement = order.add_special_requirement(command.note, _images(command.images))
        repo.add(order)
        return str(requirement.id)

    @handle(RemoveSpecialRequirement)
    def remove_requirement(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_special_requirement(command.requirement_id)
        repo.add(order)

    @handle(AddTrialNote)
    def add_trial_note(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        trial_note = order.add_trial_note(command.note, _images(command.images))
        repo.add(order)
        return str(trial_note.id)
