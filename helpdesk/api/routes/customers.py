from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from helpdesk.dependencies.auth import AgentUser, AnyUser
from helpdesk.dependencies.services import CustomerServiceDep
from helpdesk.services.customers import CustomerFilters, CustomerNotFoundError

router = APIRouter(prefix="/customers", tags=["customers"])


class ServiceDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    package_name: str
    bandwidth: str
    monthly_fee: float
    installation_date: str


class CustomerRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    registration_date: str | None = None
    status: str = Field(default="active", pattern="^(active|inactive|pending)$")
    service_type: str = ""
    service_details: ServiceDetails | None = None
    notes: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("", summary="List customers")
async def list_customers(
    service: CustomerServiceDep,
    _: AnyUser,
    q: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    service_type: str | None = Query(default=None, alias="serviceType"),
    city: str | None = Query(default=None),
) -> list[dict[str, Any]]:
    filters = CustomerFilters(search=q, status=status_filter, service_type=service_type, city=city)
    return await service.list_customers(filters)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(payload: CustomerRequest, service: CustomerServiceDep, _: AgentUser) -> dict[str, Any]:
    return await service.create_customer(payload.to_document())


@router.get("/{customer_id}")
async def get_customer(customer_id: str, service: CustomerServiceDep, _: AnyUser) -> dict[str, Any]:
    try:
        return await service.get_customer(customer_id)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{customer_id}/tickets")
async def list_customer_tickets(customer_id: str, service: CustomerServiceDep, _: AnyUser) -> list[dict[str, Any]]:
    return await service.tickets_for(customer_id)


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str, payload: CustomerRequest, service: CustomerServiceDep, _: AgentUser
) -> dict[str, Any]:
    try:
        return await service.update_customer(customer_id, payload.to_document())
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: str, service: CustomerServiceDep, _: AgentUser) -> None:
    try:
        await service.delete_customer(customer_id)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
