"""Tests for the MeasurementTemplate aggregate."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError

from tailoring.measurements.events import MeasurementTemplateSaved, MeasurementTemplateUsed
from tailoring.measurements.template import MeasurementTemplate, templates_for_client


def _make_template(name="Office shirts", measurements="=== SHIRT ===\nChest: 40", client_id="client-001", **kwargs):
    return MeasurementTemplate.create(name=name, measurements=measurements, client_id=client_id, **kwargs)


class TestCreate:
    def test_stores_canonical_text(self):
        template = _make_template(measurements='=====Shirt=====:\n "Chest" : 40 \n\nWaist:32')

        assert template.measurements == "=== Shirt ===\nChest: 40\nWaist: 32"
        assert template.usage_count == 0
        assert isinstance(template._events[0], MeasurementTemplateSaved)

    def test_accepts_legacy_shapes(self):
        assert _make_template(measurements={"Chest": "40", "Neck": "15"}).measurements == "Chest: 40\nNeck: 15"
        assert _make_template(measurements='"Chest: 40\\nWaist: 32"').measurements == "Chest: 40\nWaist: 32"

    def test_optional_links(self):
        template = _make_template(client_id=None, garment_type="  Shirt ", notes="  ")

        assert template.client_id is None
        assert template.garment_type == "Shirt"
        assert template.notes is None

    @pytest.mark.parametrize("measurements", ["", "   \n  ", {}])
    def test_empty_measurements_rejected(self, measurements):
        with pytest.raises(ValidationError) as exc:
            _make_template(measurements=measurements)
        assert "measurements" in str(exc.value)

    def test_short_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_template(name="ab")
        assert "name" in str(exc.value)


class TestUpdate:
    def test_only_given_attributes_change(self):
        template = _make_template(garment_type="Shirt")
        template.update(measurements="Chest: 41", notes="After weight loss")

        assert template.name == "Office shirts"
        assert template.garment_type == "Shirt"
        assert template.measurements == "Chest: 41"
        assert template.notes == "After weight loss"
        assert len(template._events) == 2

    def test_cannot_empty_measurements(self):
        template = _make_template()
        with pytest.raises(ValidationError):
            template.update(measurements="  ")


class TestRecordUsage:
    def test_counts_and_stamps(self):
        template = _make_template()
        template.record_usage()
        template.record_usage()

        assert template.usage_count == 2
        assert template.last_used_at is not None
        assert isinstance(template._events[-1], MeasurementTemplateUsed)


class TestTemplatesForClient:
    def test_recently_used_first_then_newest(self):
        unused_old = _make_template(name="Old unused")
        unused_old.created_at = datetime(2026, 1, 1, tzinfo=UTC)
        unused_new = _make_template(name="New unused")
        unused_new.created_at = datetime(2026, 6, 1, tzinfo=UTC)
        used = _make_template(name="Used once")
        used.created_at = datetime(2025, 1, 1, tzinfo=UTC)
        used.record_usage()
        someone_else = _make_template(name="Other client", client_id="client-002")

        result = templates_for_client([unused_old, someone_else, unused_new, used], "client-001")

        assert result == [used, unused_new, unused_old]
