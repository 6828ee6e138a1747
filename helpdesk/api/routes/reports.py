from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter

from helpdesk.dependencies.auth import AdminUser
from helpdesk.dependencies.services import ReportServiceDep

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", summary="Admin summary report")
async def admin_report(service: ReportServiceDep, _: AdminUser) -> dict[str, Any]:
    report = await service.admin_report()
    return asdict(report)
