from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from helpdesk.services.customers import CustomerService
from helpdesk.services.reports import ReportService
from helpdesk.services.users import UserService
from helpdesk.tickets.service import TicketService


def _service(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} service is not configured")
    return service


async def get_ticket_service(request: Request) -> TicketService:
    return _service(request, "ticket_service", "Ticket")


async def get_customer_service(request: Request) -> CustomerService:
    return _service(request, "customer_service", "Customer")


async def get_user_service(request: Request) -> UserService:
    return _service(request, "user_service", "User")


async def get_report_service(request: Request) -> ReportService:
    return _service(request, "report_service", "Report")


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
CustomerServiceDep = Annotated[CustomerService, Depends(get_customer_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
