from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from helpdesk.core.timestamps import parse_timestamp
from helpdesk.tickets.state import TicketStatus

from .record_store import RecordStoreClient

RECENT_LIMIT = 5
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class AdminReport:
    """Summary figures shown on the admin reports page."""

    total_customers: int
    total_tickets: int
    tickets_by_status: dict[str, int] = field(default_factory=dict)
    tickets_by_priority: dict[str, int] = field(default_factory=dict)
    recent_customers: list[Mapping[str, Any]] = field(default_factory=list)
    recent_tickets: list[Mapping[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class DashboardSummary:
    """Ticket counts and the latest tickets, visible to every role."""

    total_tickets: int
    tickets_by_status: dict[str, int]
    recent_tickets: list[Mapping[str, Any]] = field(default_factory=list)


def count_by_status(tickets: Sequence[Mapping[str, Any]]) -> dict[str, int]:
    """Count tickets per status; every known status is present, unknown ones are dropped."""

    counts = Counter(str(ticket.get("status")) for ticket in tickets)
    return {status.value: counts.get(status.value, 0) for status in TicketStatus}


def _newest_first(documents: Sequence[Mapping[str, Any]], key: str) -> list[Mapping[str, Any]]:
    return sorted(documents, key=lambda doc: parse_timestamp(doc.get(key)) or _EPOCH, reverse=True)[:RECENT_LIMIT]


def build_report(customers: Sequence[Mapping[str, Any]], tickets: Sequence[Mapping[str, Any]]) -> AdminReport:
    return AdminReport(
        total_customers=len(customers),
        total_tickets=len(tickets),
        tickets_by_status=dict(Counter(str(ticket.get("status")) for ticket in tickets)),
        tickets_by_priority=dict(Counter(str(ticket.get("priority")) for ticket in tickets)),
        recent_customers=_newest_first(customers, "registrationDate"),
        recent_tickets=_newest_first(tickets, "createdAt"),
    )


class ReportService:
    def __init__(self, client: RecordStoreClient) -> None:
        self._client = client

    async def admin_report(self) -> AdminReport:
        customers = await self._client.list("customers")
        tickets = await self._client.list("tickets")
        return build_report(customers, tickets)

    async def dashboard(self) -> DashboardSummary:
        tickets = await self._client.list("tickets")
        recent = await self._client.list(
            "tickets", {"_sort": "createdAt", "_order": "desc", "_limit": str(RECENT_LIMIT)}
        )
        return DashboardSummary(
            total_tickets=len(tickets),
            tickets_by_status=count_by_status(tickets),
            recent_tickets=recent,
        )
