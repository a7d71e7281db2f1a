"""Measurement catalog and saved measurement templates — commands and handlers."""

import json

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from tailoring.domain import logger, tailoring
from tailoring.measurements.catalog import MeasurementStandard, StandardOutfit
from tailoring.measurements.template import MeasurementTemplate


def _load_list(value):
    return json.loads(value) if isinstance(value, str) else value


@tailoring.command(part_of="MeasurementStandard")
class DefineMeasurementStandard:
    garment_type = String(required=True, max_length=100)
    field_names = Text(required=True)  # JSON list of field labels


@tailoring.command(part_of="StandardOutfit")
class DefineStandardOutfit:
    name = String(required=True, max_length=100)
    garment_types = Text(required=True)  # JSON list of garment type names


@tailoring.command(part_of="StandardOutfit")
class RemoveStandardOutfit:
    outfit_id = Identifier(required=True)


@tailoring.command_handler(part_of=MeasurementStandard)
class MeasurementStandardHandler:
    @handle(DefineMeasurementStandard)
    def define_standard(self, command):
        repo = current_domain.repository_for(MeasurementStandard)
        field_names = _load_list(command.field_names)

        existing = next(
            (
                standard
                for standard in repo._dao.query.all().items
                if standard.garment_type.lower() == command.garment_type.strip().lower()
            ),
            None,
        )
        if existing is not None:
            existing.redefine(field_names)
            standard = existing
        else:
            standard = MeasurementStandard.define(command.garment_type, field_names)

        repo.add(standard)
        logger.info("Measurement standard defined", garment_type=standard.garment_type)
        return str(standard.id)


@tailoring.command_handler(part_of=StandardOutfit)
class StandardOutfitHandler:
    @handle(DefineStandardOutfit)
    def define_outfit(self, command):
        outfit = StandardOutfit.define(command.name, _load_list(command.garment_types))
        current_domain.repository_for(StandardOutfit).add(outfit)
        return str(outfit.id)

    @handle(RemoveStandardOutfit)
    def remove_outfit(self, command):
        repo = current_domain.repository_for(StandardOutfit)
        outfit = repo.get(command.outfit_id)
        repo._dao.delete(outfit)
        logger.info("Standard outfit removed", outfit_id=str(command.outfit_id), name=outfit.name)


@tailoring.command(part_of="MeasurementTemplate")
class CreateMeasurementTemplate:
    name = String(required=True, max_length=100)
    measurements = Text(required=True)
    client_id = Identifier()
    garment_type = String(max_length=100)
    is_default = Boolean(default=False)
    notes = Text()


@tailoring.command(part_of="MeasurementTemplate")
class UpdateMeasurementTemplate:
    template_id = Identifier(required=True)
    name = String(max_length=100)
    measurements = Text()
    garment_type = String(max_length=100)
    is_default = Boolean()
    notes = Text()


@tailoring.command(part_of="MeasurementTemplate")
class RecordMeasurementTemplateUsage:
    template_id = Identifier(required=True)


@tailoring.command(part_of="MeasurementTemplate")
class DeleteMeasurementTemplate:
    template_id = Identifier(required=True)


@tailoring.command_handler(part_of=MeasurementTemplate)
class MeasurementTemplateHandler:
    @handle(CreateMeasurementTemplate)
    def create_template(self, command):
        template = MeasurementTemplate.create(
            name=command.name,
            measurements=command.measurements,
            client_id=command.client_id,
            garment_type=command.garment_type,
            is_default=command.is_default,
            notes=command.notes,
        )
        current_domain.repository_for(MeasurementTemplate).add(template)
        logger.info(
            "Measurement template saved",
            template_id=str(template.id),
            client_id=str(command.client_id) if command.client_id else None,
        )
        return str(template.id)

    @handle(UpdateMeasurementTemplate)
    def update_template(self, command):
        repo = current_domain.repository_for(MeasurementTemplate)
        template = repo.get(command.template_id)
        template.update(
            name=command.name,
            measurements=command.measurements,
            garment_type=command.garment_type,
            is_default=command.is_default,
            notes=command.notes,
        )
        repo.add(template)

    @handle(RecordMeasurementTemplateUsage)
    def record_usage(self, command):
        repo = current_domain.repository_for(MeasurementTemplate)
        template = repo.get(command.template_id)
        template.record_usage()
        repo.add(template)
        return template.usage_count

    @handle(DeleteMeasurementTemplate)
    def delete_template(self, command):
        repo = current_domain.repository_for(MeasurementTemplate)
        template = repo.get(command.template_id)
        repo._dao.delete(template)
        logger.info("Measurement template deleted", template_id=str(command.template_id), name=template.name)
