"""FastAPI routes for the Tailoring domain: orders, message and measurement templates, measurements."""

import json
from datetime import date

from fastapi import APIRouter, HTTPException, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from tailoring.api.schemas import (
    AddGarmentRequest,
    AdjustBillRequest,
    ComposeMessageRequest,
    CreateMeasurementTemplateRequest,
    CreateOrderRequest,
    CreateTemplateRequest,
    DefineOutfitRequest,
    DefineStandardRequest,
    FormatMeasurementsRequest,
    IdResponse,
    NoteRequest,
    OrderIdResponse,
    ParseMeasurementsRequest,
    PreviewTemplateRequest,
    RecordPaymentRequest,
    ReviseItemsRequest,
    ScheduleRequest,
    StatusResponse,
    TemplateIdResponse,
    UpdateMeasurementTemplateRequest,
    UpdateMeasurementsRequest,
    UpdateStatusRequest,
    UpdateTemplateRequest,
)
from tailoring.measurements.catalog import StandardOutfit, load_catalog
from tailoring.measurements.codec import coerce_text, decode, encode, expand_standard_outfit, from_dicts, to_dicts
from tailoring.measurements.management import (
    CreateMeasurementTemplate,
    DefineMeasurementStandard,
    DefineStandardOutfit,
    DeleteMeasurementTemplate,
    RecordMeasurementTemplateUsage,
    RemoveStandardOutfit,
    UpdateMeasurementTemplate,
)
from tailoring.measurements.template import MeasurementTemplate, templates_for_client
from tailoring.messaging.composer import order_context
from tailoring.messaging.management import (
    ActivateMessageTemplate,
    CreateMessageTemplate,
    DeactivateMessageTemplate,
    UpdateMessageTemplate,
)
from tailoring.messaging.template import MessageTemplate
from tailoring.order.billing import compute_profit, summarize
from tailoring.order.creation import CreateOrder
from tailoring.order.lifecycle import parse_status
from tailoring.order.listing import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, find_orders
from tailoring.order.measurements import AddGarmentMeasurements, ApplyStandardOutfit, UpdateMeasurements
from tailoring.order.modification import AdjustBill, RecordPayment, ReviseOrderItems, ScheduleOrder
from tailoring.order.notes import AddSpecialRequirement, AddTrialNote, RemoveSpecialRequirement
from tailoring.order.order import Order
from tailoring.order.reminders import inactive_clients, upcoming_reminders
from tailoring.order.status import ComposeOrderMessage, UpdateOrderStatus


def _get_or_404(aggregate_cls, identifier):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"{aggregate_cls.__name__} {identifier} not found") from None


def _iso(value):
    return value.isoformat() if value is not None else None


def _images(value):
    return json.loads(value) if value else []


def _order_summary(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "client_id": str(order.client_id),
        "status": order.status,
        "trial_date": _iso(order.trial_date),
        "delivery_date": _iso(order.delivery_date),
    }


def _order_payload(order) -> dict:
    bill = summarize(order)
    profit = compute_profit(order.items or [], order.services or [], bill.effective_amount)
    return {
        **_order_summary(order),
        "items": [
            {
                "id": str(item.id),
                "garment_type": item.garment_type,
                "quantity": item.quantity,
                "price": item.price,
                "cost": item.cost,
                "subtotal": item.subtotal,
            }
            for item in order.items or []
        ],
        "services": [
            {"id": str(service.id), "description": service.description, "amount": service.amount, "cost": service.cost}
            for service in order.services or []
        ],
        "special_requirements": [
            {"id": str(req.id), "note": req.note, "images": _images(req.images)}
            for req in order.special_requirements or []
        ],
        "trial_notes": [
            {"id": str(note.id), "note": note.note, "images": _images(note.images), "noted_at": _iso(note.noted_at)}
            for note in order.trial_notes or []
        ],
        "total_amount": order.total_amount,
        "final_amount": order.final_amount,
        "advance": order.advance,
        "measurements": order.measurements or "",
        "measurement_fields": to_dicts(decode(order.measurements)),
        "delivered_at": _iso(order.delivered_at),
        "bill": bill.to_dict(),
        "profit": {"cost": profit.cost, "profit": profit.profit, "margin": profit.margin},
    }


def _template_payload(template) -> dict:
    return {
        "id": str(template.id),
        "name": template.name,
        "template_type": template.template_type,
        "content": template.content,
        "variables": template.get_variables(),
        "is_active": template.is_active,
        "usage_count": template.usage_count,
        "last_used_at": _iso(template.last_used_at),
    }


def _measurement_template_payload(template) -> dict:
    return {
        "id": str(template.id),
        "name": template.name,
        "client_id": str(template.client_id) if template.client_id else None,
        "garment_type": template.garment_type,
        "measurements": template.measurements,
        "measurement_fields": to_dicts(decode(template.measurements)),
        "is_default": template.is_default,
        "notes": template.notes,
        "usage_count": template.usage_count,
        "last_used_at": _iso(template.last_used_at),
        "created_at": _iso(template.created_at),
    }


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    command = CreateOrder(
        client_id=body.client_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        services=json.dumps([service.model_dump() for service in body.services]),
        special_requirements=json.dumps([req.model_dump() for req in body.special_requirements]),
        measurements=coerce_text(body.measurements) or None,
        advance=body.advance,
        final_amount=body.final_amount,
        discount=body.discount,
        trial_date=body.trial_date,
        delivery_date=body.delivery_date,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("")
async def list_orders(
    status: str | None = None,
    client_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> dict:
    """Orders filtered by status, client and placement date, newest first."""
    if status is not None:
        status = parse_status(status).value
    orders = current_domain.repository_for(Order)._dao.query.all().items
    result = find_orders(
        orders,
        status=status,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return {
        "orders": [
            {**_order_summary(order), "created_at": _iso(order.created_at), "balance": summarize(order).balance}
            for order in result.orders
        ],
        "pagination": result.pagination(),
    }


@order_router.get("/reminders")
async def get_reminders(days_ahead: int = 2, today: date | None = None) -> dict:
    """Trials and deliveries due within ``days_ahead`` days of ``today``."""
    orders = current_domain.repository_for(Order)._dao.query.all().items
    reminders = upcoming_reminders(orders, today or date.today(), days_ahead=days_ahead)
    return {
        "trials": [_order_summary(order) for order in reminders.trials],
        "deliveries": [_order_summary(order) for order in reminders.deliveries],
    }


@order_router.get("/inactive-clients")
async def get_inactive_clients(days: int = 30, today: date | None = None) -> dict:
    orders = current_domain.repository_for(Order)._dao.query.all().items
    return {"client_ids": inactive_clients(orders, today or date.today(), days=days)}


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return _order_payload(_get_or_404(Order, order_id))


@order_router.put("/{order_id}/items", response_model=StatusResponse)
async def revise_items(order_id: str, body: ReviseItemsRequest) -> StatusResponse:
    command = ReviseOrderItems(
        order_id=order_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        services=(
            json.dumps([service.model_dump() for service in body.services]) if body.services is not None else None
        ),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/bill", response_model=StatusResponse)
async def adjust_bill(order_id: str, body: AdjustBillRequest) -> StatusResponse:
    command = AdjustBill(
        order_id=order_id,
        discount=body.discount,
        final_amount=body.final_amount,
        clear=body.clear,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/payments", response_model=StatusResponse)
async def record_payment(order_id: str, body: RecordPaymentRequest) -> StatusResponse:
    command = RecordPayment(order_id=order_id, amount=body.amount)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/schedule", response_model=StatusResponse)
async def schedule_order(order_id: str, body: ScheduleRequest) -> StatusResponse:
    command = ScheduleOrder(
        order_id=order_id,
        trial_date=body.trial_date,
        delivery_date=body.delivery_date,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/status")
async def update_status(order_id: str, body: UpdateStatusRequest) -> dict:
    """Move the order to a new status.

    A move to Delivered with money outstanding and no payment decision is
    not applied; the response carries ``committed: false`` and the balance.
    """
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        received_amount=body.received_amount,
        skip_payment=body.skip_payment,
        client_name=body.client_name,
    )
    return current_domain.process(command, asynchronous=False)


@order_router.put("/{order_id}/measurements", response_model=StatusResponse)
async def update_measurements(order_id: str, body: UpdateMeasurementsRequest) -> StatusResponse:
    if body.fields is not None:
        text = encode(from_dicts(field.model_dump() for field in body.fields))
    else:
        text = coerce_text(body.measurements)
    current_domain.process(UpdateMeasurements(order_id=order_id, measurements=text), asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/measurements/garments", response_model=StatusResponse)
async def add_garment_measurements(order_id: str, body: AddGarmentRequest) -> StatusResponse:
    command = AddGarmentMeasurements(order_id=order_id, garment_type=body.garment_type)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/measurements/outfits/{outfit_id}", response_model=StatusResponse)
async def apply_standard_outfit(order_id: str, outfit_id: str) -> StatusResponse:
    command = ApplyStandardOutfit(order_id=order_id, outfit_id=outfit_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/special-requirements", status_code=201, response_model=IdResponse)
async def add_special_requirement(order_id: str, body: NoteRequest) -> IdResponse:
    command = AddSpecialRequirement(
        order_id=order_id,
        note=body.note,
        images=json.dumps([image.model_dump() for image in body.images]),
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@order_router.delete("/{order_id}/special-requirements/{requirement_id}", response_model=StatusResponse)
async def remove_special_requirement(order_id: str, requirement_id: str) -> StatusResponse:
    command = RemoveSpecialRequirement(order_id=order_id, requirement_id=requirement_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/trial-notes", status_code=201, response_model=IdResponse)
async def add_trial_note(order_id: str, body: NoteRequest) -> IdResponse:
    command = AddTrialNote(
        order_id=order_id,
        note=body.note,
        images=json.dumps([image.model_dump() for image in body.images]),
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@order_router.post("/{order_id}/messages")
async def compose_message(order_id: str, body: ComposeMessageRequest) -> dict:
    command = ComposeOrderMessage(
        order_id=order_id,
        template_type=body.template_type,
        client_name=body.client_name,
    )
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Message Template Router
# ---------------------------------------------------------------------------
template_router = APIRouter(prefix="/message-templates", tags=["message-templates"])


@template_router.post("", status_code=201, response_model=TemplateIdResponse)
async def create_template(body: CreateTemplateRequest) -> TemplateIdResponse:
    command = CreateMessageTemplate(
        name=body.name,
        template_type=body.template_type,
        content=body.content,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return TemplateIdResponse(template_id=result)


@template_router.get("")
async def list_templates(template_type: str | None = None, active: bool | None = None) -> list[dict]:
    templates = current_domain.repository_for(MessageTemplate)._dao.query.all().items
    return [
        _template_payload(template)
        for template in sorted(templates, key=lambda t: t.name)
        if (template_type is None or template.template_type == template_type)
        and (active is None or template.is_active == active)
    ]


@template_router.get("/{template_id}")
async def get_template(template_id: str) -> dict:
    return _template_payload(_get_or_404(MessageTemplate, template_id))


@template_router.put("/{template_id}", response_model=StatusResponse)
async def update_template(template_id: str, body: UpdateTemplateRequest) -> StatusResponse:
    command = UpdateMessageTemplate(
        template_id=template_id,
        name=body.name,
        template_type=body.template_type,
        content=body.content,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@template_router.put("/{template_id}/activate", response_model=StatusResponse)
async def activate_template(template_id: str) -> StatusResponse:
    current_domain.process(ActivateMessageTemplate(template_id=template_id), asynchronous=False)
    return StatusResponse()


@template_router.put("/{template_id}/deactivate", response_model=StatusResponse)
async def deactivate_template(template_id: str) -> StatusResponse:
    current_domain.process(DeactivateMessageTemplate(template_id=template_id), asynchronous=False)
    return StatusResponse()


@template_router.post("/{template_id}/preview")
async def preview_template(template_id: str, body: PreviewTemplateRequest) -> dict:
    """Render a template against an order's values and/or an explicit context."""
    template = _get_or_404(MessageTemplate, template_id)
    values = {}
    if body.order_id is not None:
        values.update(order_context(_get_or_404(Order, body.order_id)))
    values.update(body.context)
    return {"rendered": template.render(values), "variables": template.get_variables()}


# ---------------------------------------------------------------------------
# Measurement Router
# ---------------------------------------------------------------------------
measurement_router = APIRouter(prefix="/measurements", tags=["measurements"])


@measurement_router.post("/parse")
async def parse_measurements(body: ParseMeasurementsRequest) -> dict:
    return {"fields": to_dicts(decode(coerce_text(body.measurements)))}


@measurement_router.post("/format")
async def format_measurements(body: FormatMeasurementsRequest) -> dict:
    return {"measurements": encode(from_dicts(field.model_dump() for field in body.fields))}


@measurement_router.get("/standards")
async def get_standards() -> dict:
    return load_catalog()


@measurement_router.put("/standards/{garment_type}", response_model=IdResponse)
async def define_standard(garment_type: str, body: DefineStandardRequest) -> IdResponse:
    command = DefineMeasurementStandard(garment_type=garment_type, field_names=json.dumps(body.field_names))
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@measurement_router.get("/outfits")
async def list_outfits() -> list[dict]:
    outfits = current_domain.repository_for(StandardOutfit)._dao.query.all().items
    return [
        {"id": str(outfit.id), "name": outfit.name, "garment_types": outfit.get_garment_types()}
        for outfit in sorted(outfits, key=lambda o: o.name)
    ]


@measurement_router.post("/outfits", status_code=201, response_model=IdResponse)
async def define_outfit(body: DefineOutfitRequest) -> IdResponse:
    command = DefineStandardOutfit(name=body.name, garment_types=json.dumps(body.garment_types))
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@measurement_router.get("/outfits/{outfit_id}/expansion")
async def expand_outfit(outfit_id: str) -> dict:
    outfit = _get_or_404(StandardOutfit, outfit_id)
    fields = expand_standard_outfit(outfit.get_garment_types(), load_catalog())
    return {"fields": to_dicts(fields), "measurements": encode(fields)}


@measurement_router.delete("/outfits/{outfit_id}", response_model=StatusResponse)
async def remove_outfit(outfit_id: str) -> StatusResponse:
    current_domain.process(RemoveStandardOutfit(outfit_id=outfit_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Measurement Template Router
# ---------------------------------------------------------------------------
measurement_template_router = APIRouter(prefix="/measurement-templates", tags=["measurement-templates"])


@measurement_template_router.post("", status_code=201, response_model=TemplateIdResponse)
async def create_measurement_template(body: CreateMeasurementTemplateRequest) -> TemplateIdResponse:
    command = CreateMeasurementTemplate(
        name=body.name,
        measurements=coerce_text(body.measurements),
        client_id=body.client_id,
        garment_type=body.garment_type,
        is_default=body.is_default,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return TemplateIdResponse(template_id=result)


@measurement_template_router.get("")
async def list_measurement_templates(client_id: str | None = None, garment_type: str | None = None) -> list[dict]:
    """Saved templates, newest first."""
    templates = current_domain.repository_for(MeasurementTemplate)._dao.query.all().items
    return [
        _measurement_template_payload(template)
        for template in sorted(templates, key=lambda t: t.created_at, reverse=True)
        if (client_id is None or str(template.client_id) == client_id)
        and (garment_type is None or template.garment_type == garment_type)
    ]


@measurement_template_router.get("/client/{client_id}")
async def list_client_measurement_templates(client_id: str) -> list[dict]:
    templates = current_domain.repository_for(MeasurementTemplate)._dao.query.all().items
    return [_measurement_template_payload(template) for template in templates_for_client(templates, client_id)]


@measurement_template_router.get("/{template_id}")
async def get_measurement_template(template_id: str) -> dict:
    return _measurement_template_payload(_get_or_404(MeasurementTemplate, template_id))


@measurement_template_router.put("/{template_id}", response_model=StatusResponse)
async def update_measurement_template(template_id: str, body: UpdateMeasurementTemplateRequest) -> StatusResponse:
    command = UpdateMeasurementTemplate(
        template_id=template_id,
        name=body.name,
        measurements=coerce_text(body.measurements) if body.measurements is not None else None,
        garment_type=body.garment_type,
        is_default=body.is_default,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@measurement_template_router.post("/{template_id}/use")
async def record_measurement_template_usage(template_id: str) -> dict:
    usage_count = current_domain.process(RecordMeasurementTemplateUsage(template_id=template_id), asynchronous=False)
    return {"template_id": template_id, "usage_count": usage_count}


@measurement_template_router.delete("/{template_id}", response_model=StatusResponse)
async def delete_measurement_template(template_id: str) -> StatusResponse:
    current_domain.process(DeleteMeasurementTemplate(template_id=template_id), asynchronous=False)
    return StatusResponse()
