from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .state import TicketCategory, TicketPriority, TicketStatus

SYSTEM_ACTOR_ID = "system"
SYSTEM_ACTOR_NAME = "System"


@dataclass(frozen=True, slots=True)
class Actor:
    """User identity attributed to a ticket transition."""

    id: str
    name: str

    @classmethod
    def system(cls) -> "Actor":
        return cls(id=SYSTEM_ACTOR_ID, name=SYSTEM_ACTOR_NAME)


@dataclass(frozen=True, slots=True)
class StatusHistoryEntry:
    """Immutable audit record of one status transition."""

    id: str
    status: TicketStatus
    timestamp: datetime
    user_id: str
    user_name: str
    notes: str = ""


@dataclass(frozen=True, slots=True)
class Ticket:
    """Aggregate representing a customer support request."""

    id: str
    title: str
    description: str
    customer_id: str
    customer_name: str
    created_by: str
    status: TicketStatus
    priority: TicketPriority
    category: TicketCategory
    created_at: datetime
    updated_at: datetime
    status_history: tuple[StatusHistoryEntry, ...] = ()
    assigned_to: str | None = None
    resolved_at: datetime | None = None
    closed_at: datetime | None = None
    notes: str = ""
    resolution: str | None = None
    attachments: tuple[str, ...] = ()


@dataclass(slots=True)
class TicketFormData:
    """Raw values submitted from the ticket create/edit form."""

    title: str = ""
    description: str = ""
    customer_id: str = ""
    customer_name: str = ""
    priority: TicketPriority | str | None = None
    category: TicketCategory | str | None = None
    assigned_to: str | None = None
    notes: str | None = None
    resolution: str | None = None
    attachments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TicketFilters:
    """Query filters supported by the ticket list view."""

    search: str | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    category: TicketCategory | None = None
    assigned_to: str | None = None
    created_by: str | None = None
    customer_id: str | None = None
    date_from: str | None = None
    date_to: str | None = None

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["q"] = self.search
        if self.status:
            params["status"] = self.status.value
        if self.priority:
            params["priority"] = self.priority.value
        if self.category:
            params["category"] = self.category.value
        if self.assigned_to:
            params["assignedTo"] = self.assigned_to
        if self.created_by:
            params["createdBy"] = self.created_by
        if self.customer_id:
            params["customerId"] = self.customer_id
        if self.date_from:
            params["dateFrom"] = self.date_from
        if self.date_to:
            params["dateTo"] = self.date_to
        return params
