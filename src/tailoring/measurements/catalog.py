"""Measurement catalog — garment measurement standards and standard outfits.

Built-in standards cover the garments every shop stitches; shops can define
more (or override the built-ins) as ``MeasurementStandard`` records. A
``StandardOutfit`` names an ordered list of garment types ("Three-piece suit"
-> Coat, Shirt, Trouser) used to expand all of their blocks at once.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text
from protean.utils.globals import current_domain

from tailoring.domain import tailoring
from tailoring.measurements.events import (
    MeasurementStandardDefined,
    StandardOutfitDefined,
)

MEASUREMENT_STANDARDS: dict[str, list[str]] = {
    "Shirt": ["Length", "Chest", "Waist", "Shoulder", "Sleeves", "Neck", "Across Back", "Armhole", "Cuff"],
    "Trouser": ["Length", "Inseam L.", "Waist", "Front Rise", "Hip", "Thigh", "Knee", "Bottom"],
    "Coat": ["Length", "Chest", "Waist", "Hip", "Shoulder", "Sleeves", "Across Back", "H. Back", "Neck"],
    "Jacket": ["Length", "Chest", "Waist", "Hip", "Shoulder", "Sleeves", "Across Back", "H. Back", "Neck"],
}


def _clean_names(names, field_name):
    cleaned = [str(name).strip() for name in (names or []) if str(name).strip()]
    if not cleaned:
        raise ValidationError({field_name: ["At least one entry is required"]})
    return cleaned


@tailoring.aggregate
class MeasurementStandard:
    """Field names measured for one garment type."""

    garment_type = String(required=True, max_length=100, unique=True)
    field_names = Text(required=True)  # JSON list of field labels
    updated_at = DateTime()

    @classmethod
    def define(cls, garment_type, field_names):
        names = _clean_names(field_names, "field_names")
        standard = cls(
            garment_type=garment_type.strip(),
            field_names=json.dumps(names),
            updated_at=datetime.now(UTC),
        )
        standard._raise_defined(names)
        return standard

    def redefine(self, field_names):
        names = _clean_names(field_names, "field_names")
        self.field_names = json.dumps(names)
        self.updated_at = datetime.now(UTC)
        self._raise_defined(names)

    def _raise_defined(self, names):
        self.raise_(
            MeasurementStandardDefined(
                standard_id=str(self.id),
                garment_type=self.garment_type,
                field_names=json.dumps(names),
            )
        )

    def get_field_names(self) -> list[str]:
        return json.loads(self.field_names) if self.field_names else []


@tailoring.aggregate
class StandardOutfit:
    """A named, ordered list of garment types."""

    name = String(required=True, min_length=2, max_length=100)
    garment_types = Text(required=True)  # JSON list of garment type names
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def define(cls, name, garment_types):
        types = _clean_names(garment_types, "garment_types")
        now = datetime.now(UTC)
        outfit = cls(
            name=name.strip(),
            garment_types=json.dumps(types),
            created_at=now,
            updated_at=now,
        )
        outfit.raise_(
            StandardOutfitDefined(
                outfit_id=str(outfit.id),
                name=outfit.name,
                garment_types=json.dumps(types),
            )
        )
        return outfit

    def get_garment_types(self) -> list[str]:
        return json.loads(self.garment_types) if self.garment_types else []


def load_catalog() -> dict[str, list[str]]:
    """Built-in standards overlaid with the ones stored for this shop."""
    catalog = {name: list(fields) for name, fields in MEASUREMENT_STANDARDS.items()}

    repo = current_domain.repository_for(MeasurementStandard)
    for standard in repo._dao.query.all().items:
        # Stored definitions replace a built-in of the same name, whatever its casing
        for name in [key for key in catalog if key.lower() == standard.garment_type.lower()]:
            del catalog[name]
        catalog[standard.garment_type] = standard.get_field_names()

    return catalog
