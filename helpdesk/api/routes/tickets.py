from __future__ import annotations

from datetime import datetime
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from helpdesk.dependencies.auth import ActorDep, AgentUser, AnyActorDep, AnyUser
from helpdesk.dependencies.services import TicketServiceDep
from helpdesk.tickets.models import StatusHistoryEntry, Ticket, TicketFilters, TicketFormData
from helpdesk.tickets.service import (
    InvalidTicketStatusError,
    InvalidTicketTransitionError,
    TicketNotFoundError,
    TicketServiceError,
    TicketValidationError,
)
from helpdesk.tickets.state import TicketCategory, TicketPriority, TicketStateMachine, TicketStatus

router = APIRouter(prefix="/tickets", tags=["tickets"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TicketFormRequest(CamelModel):
    title: str = ""
    description: str = ""
    customer_id: str = ""
    customer_name: str = ""
    priority: str | None = None
    category: str | None = None
    assigned_to: str | None = None
    notes: str | None = None
    resolution: str | None = None
    attachments: list[str] = Field(default_factory=list)

    def to_form(self) -> TicketFormData:
        return TicketFormData(
            title=self.title,
            description=self.description,
            customer_id=self.customer_id,
            customer_name=self.customer_name,
            priority=self.priority,
            category=self.category,
            assigned_to=self.assigned_to,
            notes=self.notes,
            resolution=self.resolution,
            attachments=list(self.attachments),
        )


class TicketUpdateRequest(TicketFormRequest):
    status: str


class TicketStatusChangeRequest(CamelModel):
    status: str
    notes: str | None = Field(default=None, max_length=2000)


class BulkDeleteRequest(CamelModel):
    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(CamelModel):
    deleted: list[str]
    missing: list[str]


class StatusHistoryModel(CamelModel):
    id: str
    status: TicketStatus
    timestamp: datetime
    user_id: str
    user_name: str
    notes: str = ""


class TicketResponse(CamelModel):
    id: str
    title: str
    description: str
    customer_id: str
    customer_name: str
    created_by: str
    assigned_to: str | None = None
    status: TicketStatus
    priority: TicketPriority
    category: TicketCategory
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    closed_at: datetime | None = None
    notes: str = ""
    resolution: str | None = None
    attachments: list[str] = Field(default_factory=list)
    status_history: list[StatusHistoryModel] = Field(default_factory=list)


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse.model_validate(ticket)


def _to_history(entry: StatusHistoryEntry) -> StatusHistoryModel:
    return StatusHistoryModel.model_validate(entry)


def _raise_http(exc: TicketServiceError) -> NoReturn:
    if isinstance(exc, TicketNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, TicketValidationError):
        raise HTTPException(status_code=422, detail={"message": str(exc), "fields": list(exc.fields)}) from exc
    if isinstance(exc, InvalidTicketStatusError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, InvalidTicketTransitionError):
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    raise exc


@router.get("", response_model=list[TicketResponse], summary="List tickets")
async def list_tickets(
    service: TicketServiceDep,
    _: AnyUser,
    q: str | None = Query(default=None),
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    priority: TicketPriority | None = Query(default=None),
    category: TicketCategory | None = Query(default=None),
    assigned_to: str | None = Query(default=None, alias="assignedTo"),
    created_by: str | None = Query(default=None, alias="createdBy"),
    customer_id: str | None = Query(default=None, alias="customerId"),
    date_from: str | None = Query(default=None, alias="dateFrom"),
    date_to: str | None = Query(default=None, alias="dateTo"),
) -> list[TicketResponse]:
    filters = TicketFilters(
        search=q,
        status=status_filter,
        priority=priority,
        category=category,
        assigned_to=assigned_to,
        created_by=created_by,
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
    )
    tickets = await service.list_tickets(filters)
    return [_to_response(ticket) for ticket in tickets]


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketFormRequest, service: TicketServiceDep, actor: ActorDep) -> TicketResponse:
    try:
        ticket = await service.create_ticket(payload.to_form(), actor=actor)
    except TicketServiceError as exc:
        _raise_http(exc)
    return _to_response(ticket)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_tickets(
    payload: BulkDeleteRequest, service: TicketServiceDep, _: AgentUser
) -> BulkDeleteResponse:
    result = await service.bulk_delete(payload.ids)
    return BulkDeleteResponse(deleted=result.deleted, missing=result.missing)


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, service: TicketServiceDep, _: AnyUser) -> TicketResponse:
    try:
        ticket = await service.get_ticket(ticket_id)
    except TicketServiceError as exc:
        _raise_http(exc)
    return _to_response(ticket)


@router.put("/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdateRequest,
    service: TicketServiceDep,
    actor: ActorDep,
) -> TicketResponse:
    try:
        ticket = await service.update_ticket(ticket_id, payload.to_form(), status=payload.status, actor=actor)
    except TicketServiceError as exc:
        _raise_http(exc)
    return _to_response(ticket)


@router.patch("/{ticket_id}/status", response_model=TicketResponse)
async def change_ticket_status(
    ticket_id: str,
    payload: TicketStatusChangeRequest,
    service: TicketServiceDep,
    actor: AnyActorDep,
) -> TicketResponse:
    try:
        ticket = await service.change_status(ticket_id, new_status=payload.status, actor=actor, notes=payload.notes)
    except TicketServiceError as exc:
        _raise_http(exc)
    return _to_response(ticket)


@router.get("/{ticket_id}/history", response_model=list[StatusHistoryModel])
async def get_ticket_history(ticket_id: str, service: TicketServiceDep, _: AnyUser) -> list[StatusHistoryModel]:
    try:
        entries = await service.get_history(ticket_id)
    except TicketServiceError as exc:
        _raise_http(exc)
    return [_to_history(entry) for entry in entries]


@router.get("/{ticket_id}/transitions", response_model=list[TicketStatus])
async def get_allowed_transitions(ticket_id: str, service: TicketServiceDep, _: AnyUser) -> list[TicketStatus]:
    try:
        ticket = await service.get_ticket(ticket_id)
    except TicketServiceError as exc:
        _raise_http(exc)
    return TicketStateMachine.allowed_targets(ticket.status)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(ticket_id: str, service: TicketServiceDep, _: AgentUser) -> None:
    try:
        await service.delete_ticket(ticket_id)
    except TicketServiceError as exc:
        _raise_http(exc)
