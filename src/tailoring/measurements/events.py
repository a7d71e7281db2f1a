"""Domain events for measurement standards, standard outfits and saved measurement templates."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from tailoring.domain import tailoring


@tailoring.event(part_of="MeasurementStandard")
class MeasurementStandardDefined:
    """The field list measured for a garment type was defined or replaced."""

    __version__ = 1

    standard_id = Identifier(required=True)
    garment_type = String(required=True)
    field_names = Text(required=True)  # JSON list


@tailoring.event(part_of="StandardOutfit")
class StandardOutfitDefined:
    """A named outfit (ordered garment types) was defined."""

    __version__ = 1

    outfit_id = Identifier(required=True)
    name = String(required=True)
    garment_types = Text(required=True)  # JSON list


@tailoring.event(part_of="MeasurementTemplate")
class MeasurementTemplateSaved:
    """A named measurement text was saved for reuse, new or edited."""

    __version__ = 1

    template_id = Identifier(required=True)
    name = String(required=True)
    client_id = Identifier()
    garment_type = String()
    measurements = Text(required=True)


@tailoring.event(part_of="MeasurementTemplate")
class MeasurementTemplateUsed:
    __version__ = 1

    template_id = Identifier(required=True)
    usage_count = Integer(required=True)
    used_at = DateTime(required=True)
