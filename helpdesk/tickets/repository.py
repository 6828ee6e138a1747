from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from helpdesk.core.timestamps import format_timestamp, parse_timestamp
from helpdesk.services.record_store import RecordNotFoundError, RecordStoreClient

from .models import StatusHistoryEntry, Ticket, TicketFilters
from .state import TicketCategory, TicketPriority, TicketStatus


class TicketRepository:
    """Data access layer for ticket documents in the record store."""

    COLLECTION = "tickets"

    def __init__(self, client: RecordStoreClient) -> None:
        self._client = client

    async def get(self, ticket_id: str) -> Ticket | None:
        try:
            document = await self._client.get(self.COLLECTION, ticket_id)
        except RecordNotFoundError:
            return None
        return self._document_to_ticket(document)

    async def list(self, filters: TicketFilters | None = None) -> list[Ticket]:
        params = filters.to_query_params() if filters else {}
        documents = await self._client.list(self.COLLECTION, params)
        return [self._document_to_ticket(document) for document in documents]

    async def create(self, ticket: Ticket) -> Ticket:
        document = await self._client.create(self.COLLECTION, self._ticket_to_document(ticket))
        return self._document_to_ticket(document)

    async def put(self, ticket_id: str, ticket: Ticket) -> Ticket | None:
        try:
            document = await self._client.replace(self.COLLECTION, ticket_id, self._ticket_to_document(ticket))
        except RecordNotFoundError:
            return None
        return self._document_to_ticket(document)

    async def delete(self, ticket_id: str) -> bool:
        try:
            await self._client.delete(self.COLLECTION, ticket_id)
        except RecordNotFoundError:
            return False
        return True

    @staticmethod
    def _ticket_to_document(ticket: Ticket) -> dict[str, Any]:
        document: dict[str, Any] = {
            "title": ticket.title,
            "description": ticket.description,
            "customerId": ticket.customer_id,
            "customerName": ticket.customer_name,
            "createdBy": ticket.created_by,
            "status": ticket.status.value,
            "priority": ticket.priority.value,
            "category": ticket.category.value,
            "createdAt": format_timestamp(ticket.created_at),
            "updatedAt": format_timestamp(ticket.updated_at),
            "statusHistory": [_entry_to_document(entry) for entry in ticket.status_history],
            "attachments": list(ticket.attachments),
            "notes": ticket.notes,
        }
        if ticket.id:
            document["id"] = ticket.id
        if ticket.assigned_to:
            document["assignedTo"] = ticket.assigned_to
        if ticket.resolution is not None:
            document["resolution"] = ticket.resolution
        if ticket.resolved_at is not None:
            document["resolvedAt"] = format_timestamp(ticket.resolved_at)
        if ticket.closed_at is not None:
            document["closedAt"] = format_timestamp(ticket.closed_at)
        return document

    @staticmethod
    def _document_to_ticket(document: Mapping[str, Any]) -> Ticket:
        created_at = _require_datetime(document.get("createdAt") or document.get("updatedAt"))
        history = tuple(_document_to_entry(item) for item in document.get("statusHistory") or [])
        return Ticket(
            id=str(document["id"]),
            title=str(document.get("title", "")),
            description=str(document.get("description", "")),
            customer_id=str(document.get("customerId", "")),
            customer_name=str(document.get("customerName", "")),
            created_by=str(document.get("createdBy", "")),
            status=TicketStatus(str(document.get("status") or TicketStatus.OPEN.value)),
            priority=TicketPriority(str(document.get("priority") or TicketPriority.MEDIUM.value)),
            category=TicketCategory(str(document.get("category") or TicketCategory.OTHER.value)),
            created_at=created_at,
            updated_at=parse_timestamp(document.get("updatedAt")) or created_at,
            status_history=history,
            assigned_to=str(document["assignedTo"]) if document.get("assignedTo") else None,
            resolved_at=parse_timestamp(document.get("resolvedAt")),
            closed_at=parse_timestamp(document.get("closedAt")),
            notes=str(document.get("notes") or ""),
            resolution=document.get("resolution"),
            attachments=tuple(str(item) for item in document.get("attachments") or []),
        )


def _entry_to_document(entry: StatusHistoryEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "status": entry.status.value,
        "timestamp": format_timestamp(entry.timestamp),
        "userId": entry.user_id,
        "userName": entry.user_name,
        "notes": entry.notes,
    }


def _document_to_entry(document: Mapping[str, Any]) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        id=str(document["id"]),
        status=TicketStatus(str(document["status"])),
        timestamp=_require_datetime(document.get("timestamp")),
        user_id=str(document.get("userId", "")),
        user_name=str(document.get("userName", "")),
        notes=str(document.get("notes") or ""),
    )


def _require_datetime(value: Any) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid timestamp value: {value!r}")
    return parsed
