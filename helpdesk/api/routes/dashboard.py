from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter

from helpdesk.dependencies.auth import AnyUser
from helpdesk.dependencies.services import ReportServiceDep

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", summary="Ticket counts per status and the newest tickets")
async def dashboard(service: ReportServiceDep, _: AnyUser) -> dict[str, Any]:
    summary = await service.dashboard()
    return asdict(summary)
