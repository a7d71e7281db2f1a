"""MeasurementTemplate aggregate — a client's measurements saved under a name.

Tailors keep a client's fitted measurements ("Wedding sherwani", "Office
shirts") so the next order can start from them. The text is stored in the
same canonical form as an order's measurements; a template may be tied to a
client and to a garment type, and counts how often it has been used.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from tailoring.domain import tailoring
from tailoring.measurements.codec import coerce_text, decode, encode
from tailoring.measurements.events import MeasurementTemplateSaved, MeasurementTemplateUsed


def _canonical_measurements(raw) -> str:
    text = encode(decode(coerce_text(raw)))
    if not text:
        raise ValidationError({"measurements": ["Measurements cannot be empty"]})
    return text


def _clean_optional(value):
    if value is None:
        return None
    return value.strip() or None


@tailoring.aggregate
class MeasurementTemplate:
    name = String(required=True, min_length=3, max_length=100)
    client_id = Identifier()
    garment_type = String(max_length=100)
    measurements = Text(required=True)
    is_default = Boolean(default=False)
    notes = Text()
    usage_count = Integer(default=0)
    last_used_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, measurements, client_id=None, garment_type=None, is_default=False, notes=None):
        now = datetime.now(UTC)
        template = cls(
            name=(name or "").strip(),
            client_id=client_id,
            garment_type=_clean_optional(garment_type),
            measurements=_canonical_measurements(measurements),
            is_default=bool(is_default),
            notes=_clean_optional(notes),
            usage_count=0,
            created_at=now,
            updated_at=now,
        )
        template._raise_saved()
        return template

    def update(self, name=None, measurements=None, garment_type=None, is_default=None, notes=None):
        """Change the given attributes; ``None`` leaves an attribute as it is."""
        if name is not None:
            self.name = name.strip()
        if measurements is not None:
            self.measurements = _canonical_measurements(measurements)
        if garment_type is not None:
            self.garment_type = _clean_optional(garment_type)
        if is_default is not None:
            self.is_default = is_default
        if notes is not None:
            self.notes = _clean_optional(notes)
        self.updated_at = datetime.now(UTC)
        self._raise_saved()

    def record_usage(self):
        now = datetime.now(UTC)
        self.usage_count = (self.usage_count or 0) + 1
        self.last_used_at = now
        self.raise_(MeasurementTemplateUsed(template_id=str(self.id), usage_count=self.usage_count, used_at=now))

    def _raise_saved(self):
        self.raise_(
            MeasurementTemplateSaved(
                template_id=str(self.id),
                name=self.name,
                client_id=str(self.client_id) if self.client_id else None,
                garment_type=self.garment_type,
                measurements=self.measurements,
            )
        )


def templates_for_client(templates, client_id) -> list:
    """A client's templates, most recently used first, then newest first."""
    earliest = datetime.min.replace(tzinfo=UTC)
    mine = [template for template in templates if str(template.client_id) == str(client_id)]
    return sorted(
        mine,
        key=lambda t: (t.last_used_at or earliest, t.created_at or earliest),
        reverse=True,
    )
