"""Order measurements — replace the text, or grow it by garment blocks."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tailoring.domain import tailoring
from tailoring.measurements.catalog import StandardOutfit, load_catalog
from tailoring.measurements.codec import (
    append_garment_block,
    coerce_text,
    decode,
    encode,
    expand_standard_outfit,
)
from tailoring.order.order import Order


@tailoring.command(part_of="Order")
class UpdateMeasurements:
    order_id = Identifier(required=True)
    measurements = Text()


@tailoring.command(part_of="Order")
class AddGarmentMeasurements:
    order_id = Identifier(required=True)
    garment_type = String(required=True, max_length=100)


@tailoring.command(part_of="Order")
class ApplyStandardOutfit:
    order_id = Identifier(required=True)
    outfit_id = Identifier(required=True)


@tailoring.command_handler(part_of=Order)
class OrderMeasurementsHandler:
    @handle(UpdateMeasurements)
    def update_measurements(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        # Normalize through the codec so stored text is always canonical
        order.update_measurements(encode(decode(coerce_text(command.measurements))))
        repo.add(order)

    @handle(AddGarmentMeasurements)
    def add_garment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        fields = append_garment_block(decode(order.measurements), command.garment_type, load_catalog())
        order.update_measurements(encode(fields))
        repo.add(order)

    @handle(ApplyStandardOutfit)
    def apply_outfit(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        outfit = current_domain.repository_for(StandardOutfit).get(command.outfit_id)

        blocks = expand_standard_outfit(outfit.get_garment_types(), load_catalog())
        order.update_measurements(encode([*decode(order.measurements), *blocks]))
        repo.add(order)
