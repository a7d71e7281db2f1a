"""Pydantic request/response schemas for the Tailoring API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    garment_type: str = Field(min_length=1, max_length=100)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    cost: float = Field(ge=0, default=0.0)


class AdditionalServiceSchema(BaseModel):
    description: str = Field(min_length=1, max_length=200)
    amount: float = Field(ge=0)
    cost: float = Field(ge=0, default=0.0)


class ImageReferenceSchema(BaseModel):
    url: str
    key: str | None = None


class SpecialRequirementSchema(BaseModel):
    note: str = Field(min_length=1)
    images: list[ImageReferenceSchema] = []


class MeasurementFieldSchema(BaseModel):
    label: str
    value: str = ""
    is_header: bool = False


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    client_id: str
    items: list[OrderItemSchema] = Field(min_length=1)
    services: list[AdditionalServiceSchema] = []
    special_requirements: list[SpecialRequirementSchema] = []
    measurements: str | dict[str, str] | None = None
    advance: float = Field(ge=0, default=0.0)
    final_amount: float | None = Field(ge=0, default=None)
    discount: float | None = None
    trial_date: date | None = None
    delivery_date: date | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "client_id": "client-001",
                    "items": [{"garment_type": "Shirt", "quantity": 2, "price": 500.0, "cost": 200.0}],
                    "services": [{"description": "Express stitching", "amount": 200.0}],
                    "advance": 400.0,
                    "delivery_date": "2026-11-02",
                }
            ]
        }
    }


class ReviseItemsRequest(BaseModel):
    items: list[OrderItemSchema] = Field(min_length=1)
    services: list[AdditionalServiceSchema] | None = None


class AdjustBillRequest(BaseModel):
    discount: float | None = None
    final_amount: float | None = Field(ge=0, default=None)
    clear: bool = False


class RecordPaymentRequest(BaseModel):
    amount: float = Field(gt=0)


class ScheduleRequest(BaseModel):
    trial_date: date | None = None
    delivery_date: date | None = None


class UpdateStatusRequest(BaseModel):
    status: str
    received_amount: float | None = None
    skip_payment: bool = False
    client_name: str | None = None


class UpdateMeasurementsRequest(BaseModel):
    measurements: str | dict[str, str] | None = None
    fields: list[MeasurementFieldSchema] | None = None


class AddGarmentRequest(BaseModel):
    garment_type: str


class NoteRequest(BaseModel):
    note: str
    images: list[ImageReferenceSchema] = []


class ComposeMessageRequest(BaseModel):
    template_type: str
    client_name: str | None = None


# ---------------------------------------------------------------------------
# Message Template Request Schemas
# ---------------------------------------------------------------------------
class CreateTemplateRequest(BaseModel):
    name: str
    template_type: str
    content: str
    is_active: bool = True


class UpdateTemplateRequest(BaseModel):
    name: str | None = None
    template_type: str | None = None
    content: str | None = None


class PreviewTemplateRequest(BaseModel):
    order_id: str | None = None
    context: dict[str, str] = {}


# ---------------------------------------------------------------------------
# Measurement Request Schemas
# ---------------------------------------------------------------------------
class ParseMeasurementsRequest(BaseModel):
    measurements: str | dict[str, str] | None = None


class FormatMeasurementsRequest(BaseModel):
    fields: list[MeasurementFieldSchema]


class DefineStandardRequest(BaseModel):
    field_names: list[str] = Field(min_length=1)


class DefineOutfitRequest(BaseModel):
    name: str
    garment_types: list[str] = Field(min_length=1)


class CreateMeasurementTemplateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    measurements: str | dict[str, str]
    client_id: str | None = None
    garment_type: str | None = None
    is_default: bool = False
    notes: str | None = None


class UpdateMeasurementTemplateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    measurements: str | dict[str, str] | None = None
    garment_type: str | None = None
    is_default: bool | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class TemplateIdResponse(BaseModel):
    template_id: str


class IdResponse(BaseModel):
    id: str


class StatusResponse(BaseModel):
    status: str = "ok"
